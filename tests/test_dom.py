"""Tests for the in-memory host document and selector engine."""

import pytest
from fastcore.xml import Button, Div, Li, Span, Ul

from mojokit import ConfigurationError, Document, Element
from mojokit.host import DelegatingSource, EventSource, dom_event_name


@pytest.fixture
def doc():
    return Document.from_ft(
        Div(
            Button("Save", id="save", cls="btn primary"),
            Ul(Li(Span("one"), cls="item"), Li("two", cls="item", data_kind="x")),
            id="panel",
        ),
        Div(id="sidebar", hidden=False),
    )


def test_from_ft_builds_tree(doc):
    panel = doc.get_element_by_id("panel")
    button = doc.get_element_by_id("save")

    assert panel.tag == "div"
    assert button.text == "Save"
    assert button.classes == ["btn", "primary"]
    assert button.parent is panel
    assert "hidden" not in doc.get_element_by_id("sidebar").attrs


@pytest.mark.parametrize("selector,count", [
    ("li", 2),
    (".item", 2),
    ("ul > li", 2),
    ("div li span", 1),
    ("#panel > li", 0),
    ("button.btn.primary", 1),
    ("[data-kind=x]", 1),
    ("#save, #sidebar", 2),
])
def test_query(doc, selector, count):
    assert len(doc.query(selector)) == count


def test_query_is_relative_to_root(doc):
    panel = doc.get_element_by_id("panel")
    assert panel.query("div") == []
    assert doc.get_element_by_id("sidebar").query("li") == []


@pytest.mark.parametrize("selector", ["", "> li", "li >", "li[", "%bad"])
def test_invalid_selectors(doc, selector):
    with pytest.raises(ConfigurationError):
        doc.query(selector)


def test_dispatch_bubbles_until_stopped(doc):
    order = []
    span = doc.query_first("span")
    span.listen("click", lambda e: order.append(("span", e.current_target)))
    doc.get_element_by_id("panel").listen("onclick", lambda e: (order.append("panel"), e.stop_propagation()))
    doc.listen("click", lambda e: order.append("document"))

    event = span.dispatch("onclick", x=1)

    assert order == [("span", span), "panel"]
    assert event.target is span
    assert event.x == 1
    assert event.propagation_stopped


def test_closest_stops_at_root(doc):
    span = doc.query_first("span")
    panel = doc.get_element_by_id("panel")

    assert span.closest(".item").tag == "li"
    assert span.closest("#panel", root=panel) is None
    assert span.closest("#panel") is panel


def test_detached_elements_are_not_connected(doc):
    panel = doc.get_element_by_id("panel")
    assert panel.is_connected
    panel.remove()
    assert not panel.is_connected
    assert doc.get_element_by_id("save") is None


def test_elements_satisfy_the_host_capability():
    element = Element("div")
    assert isinstance(element, EventSource)
    assert isinstance(element, DelegatingSource)


def test_dom_event_names():
    assert dom_event_name("onClick") == "click"
    assert dom_event_name("click") == "click"
    assert dom_event_name("on") == "on"
