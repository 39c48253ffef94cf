"""Tests for environment configuration and logging setup."""

import logging

import pytest

from mojokit import Environment, MojoConfig, Runtime, configure_logging, get_runtime, set_runtime


def test_for_environment():
    development = MojoConfig.for_environment(Environment.DEVELOPMENT)
    production = MojoConfig.for_environment(Environment.PRODUCTION)
    testing = MojoConfig.for_environment(Environment.TESTING)

    assert development.is_development
    assert development.logging.level == "DEBUG"
    assert not production.is_development
    assert production.logging.level == "INFO"
    assert not testing.is_development
    assert testing.logging.level == "WARNING"


def test_from_dict():
    config = MojoConfig.from_dict({"environment": "production", "debug": True, "logging": {"level": "ERROR"}})

    assert config.environment is Environment.PRODUCTION
    assert config.is_development
    assert config.logging.level == "ERROR"


def test_from_environment(monkeypatch):
    monkeypatch.setenv("MOJO_ENV", "production")
    monkeypatch.setenv("MOJO_DEBUG", "true")
    monkeypatch.setenv("MOJO_LOG_LEVEL", "warning")

    config = MojoConfig.from_environment()

    assert config.environment is Environment.PRODUCTION
    assert config.debug is True
    assert config.logging.level == "WARNING"


def test_unknown_environment_is_rejected(monkeypatch):
    monkeypatch.setenv("MOJO_ENV", "staging")
    with pytest.raises(ValueError):
        MojoConfig.from_environment()


def test_configure_logging_installs_one_handler():
    config = MojoConfig.for_environment(Environment.TESTING)

    logger = configure_logging(config)
    configure_logging(config)

    handlers = [h for h in logger.handlers if getattr(h, "_mojokit_handler", False)]
    assert logger.name == "mojokit"
    assert logger.level == logging.WARNING
    assert len(handlers) == 1

    for handler in handlers:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def test_default_runtime_is_shared_and_replaceable(monkeypatch):
    monkeypatch.delenv("MOJO_ENV", raising=False)
    set_runtime(None)
    first = get_runtime()
    assert get_runtime() is first

    replacement = Runtime()
    set_runtime(replacement)
    assert get_runtime() is replacement
    set_runtime(None)
