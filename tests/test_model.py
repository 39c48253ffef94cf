"""Tests for the notifying model store."""

import pytest

from mojokit import ConfigurationError, MessagingBus, ModelStore, model_topic


@pytest.fixture
def store():
    return ModelStore(MessagingBus())


def test_set_deep_copies_value(store):
    profile = {"name": "Ada", "tags": ["math"]}
    store.set("profile", profile)
    profile["tags"].append("poetry")

    assert store.get("profile") == {"name": "Ada", "tags": ["math"]}


def test_add_on_absent_key_behaves_like_set(store):
    other = ModelStore(MessagingBus())
    store.add("colors", "red")
    other.set("colors", "red")

    assert store.get("colors") == other.get("colors") == "red"


def test_add_promotes_scalar_to_list(store):
    store.set("colors", "red")
    store.add("colors", "blue")

    assert store.get("colors") == ["red", "blue"]


def test_add_splices_lists(store):
    store.set("colors", ["red"])
    store.add("colors", ["green", "blue"])
    store.add("colors", "white")

    assert store.get("colors") == ["red", "green", "blue", "white"]


@pytest.mark.parametrize("value", [None, ""])
def test_add_rejects_missing_values(store, value):
    with pytest.raises(ConfigurationError):
        store.add("colors", value)


def test_every_mutation_notifies_exactly_once(store):
    published = []
    hooks = []
    store.bus.subscribe(model_topic("colors"), lambda: published.append(1))
    store.get_reference("colors").listen("on_notify", hooks.append)

    store.set("colors", "red")
    store.add("colors", "blue")
    store.add("colors", ["green", "white"])
    store.remove("colors")

    assert len(published) == 4
    assert len(hooks) == 4


def test_notify_publishes_once_regardless_of_subscriber_count(store):
    calls = []
    for _ in range(3):
        store.add_observer("k", lambda: calls.append(1))
    hooks = []
    store.get_reference("k").listen("onNotify", hooks.append)

    store.notify("k")

    assert len(calls) == 3
    assert len(hooks) == 1


def test_get_missing_key_returns_none_and_logs(store, caplog):
    with caplog.at_level("DEBUG", logger="mojokit.core.model"):
        assert store.get("never") is None
    assert "never" in caplog.text


def test_contains_only_truthy_values(store):
    assert not store.contains("count")
    store.set("count", 0)
    assert not store.contains("count")
    store.set("count", 3)
    assert store.contains("count")


def test_add_on_falsy_value_replaces_it(store):
    store.set("items", [])
    store.add("items", "a")
    assert store.get("items") == "a"


def test_remove_keeps_reference(store):
    reference = store.get_reference("profile")
    store.set("profile", {"name": "Ada"})
    store.remove("profile")

    assert store.get("profile") is None
    assert store.get_reference("profile") is reference
    assert reference.get_value() is None


def test_reference_reads_and_writes_through(store):
    reference = store.get_reference("title")
    reference.set_value("Hello")
    assert store.get("title") == "Hello"
    assert reference.key == "title"


def test_observer_can_be_removed(store):
    calls = []
    handle = store.add_observer("k", lambda: calls.append(1))
    store.set("k", 1)
    store.remove_observer(handle)
    store.set("k", 2)

    assert calls == [1]


def test_deferred_callbacks_drain_after_outermost_notify(store):
    order = []

    def on_a():
        order.append("a-notified")
        store.defer(lambda: order.append("deferred"))
        store.set("b", 1)
        order.append("a-done")

    store.add_observer("a", on_a)
    store.add_observer("b", lambda: order.append("b-notified"))

    store.set("a", 1)

    assert order == ["a-notified", "b-notified", "a-done", "deferred"]


def test_defer_outside_notify_runs_immediately(store):
    calls = []
    store.defer(lambda: calls.append(1))
    assert calls == [1]


@pytest.mark.parametrize("key", [None, ""])
def test_keys_must_be_non_empty_strings(store, key):
    with pytest.raises(ConfigurationError):
        store.set(key, 1)
