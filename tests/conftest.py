"""Shared fixtures: isolated runtimes in development and production configuration."""

import pytest

from mojokit import Document, Element, Environment, MojoConfig, Runtime, set_runtime


def build_runtime(environment: Environment) -> Runtime:
    return Runtime(config=MojoConfig.for_environment(environment), document=Document())


@pytest.fixture
def runtime():
    """Development runtime: unit errors are logged and swallowed."""
    rt = build_runtime(Environment.DEVELOPMENT)
    set_runtime(rt)
    yield rt
    set_runtime(None)


@pytest.fixture
def prod_runtime():
    """Production runtime: unit errors propagate."""
    rt = build_runtime(Environment.PRODUCTION)
    set_runtime(rt)
    yield rt
    set_runtime(None)


@pytest.fixture
def page(runtime):
    """A document with a panel holding a button and a list."""
    runtime.document = Document([
        Element("div", {"id": "panel", "class": "panel"}, [
            Element("button", {"id": "go", "class": "btn"}),
            Element("ul", {"id": "items"}, [
                Element("li", {"class": "item", "id": "first"}, [Element("span", {"id": "label"})]),
            ]),
        ]),
        Element("div", {"id": "sidebar"}),
    ])
    return runtime.document
