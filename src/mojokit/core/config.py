"""
Configuration Management for mojokit

Environment-aware configuration following the same shape for development,
testing and production. ``debug`` selects development dispatch semantics:
unit errors are logged and swallowed instead of aborting the command chain.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum
import logging
import os


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class MojoConfig:
    """Complete runtime configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_development(self) -> bool:
        return self.debug

    @classmethod
    def for_environment(cls, environment: Environment) -> 'MojoConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.debug = False
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MojoConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])

        for key, value in config_dict.get("logging", {}).items():
            if hasattr(config.logging, key):
                setattr(config.logging, key, value)

        return config

    @classmethod
    def from_environment(cls) -> 'MojoConfig':
        """Create configuration from environment variables"""
        env_name = os.getenv('MOJO_ENV', 'development')
        config = cls.for_environment(Environment(env_name))

        if os.getenv('MOJO_DEBUG'):
            config.debug = os.getenv('MOJO_DEBUG').lower() == 'true'

        if os.getenv('MOJO_LOG_LEVEL'):
            config.logging.level = os.getenv('MOJO_LOG_LEVEL').upper()

        return config


def configure_logging(config: Optional[MojoConfig] = None) -> logging.Logger:
    """Install a stream handler on the ``mojokit`` logger using ``config.logging``."""
    config = config or MojoConfig.from_environment()
    logger = logging.getLogger("mojokit")
    logger.setLevel(config.logging.level)
    if not any(getattr(h, "_mojokit_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler._mojokit_handler = True
        logger.addHandler(handler)
    for handler in logger.handlers:
        if getattr(handler, "_mojokit_handler", False):
            handler.setFormatter(logging.Formatter(config.logging.format))
    return logger
