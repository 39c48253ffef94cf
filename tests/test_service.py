"""Tests for services, response caching, retries and the locator."""

import pytest

from helpers import EchoCommand
from mojokit import Behavior, ConfigurationError, Controller, Element, Locator, Request, Service


class FakeTransport:
    """Transport double: answers each call with the next scripted outcome."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, method, url, params, on_success, on_error):
        self.calls.append((method, url, dict(params)))
        kind, payload, *status = self.outcomes.pop(0)
        if kind == "ok":
            return on_success(payload)
        return on_error(payload, *status)


@pytest.fixture
def transport(runtime):
    runtime.transport = FakeTransport()
    return runtime.transport


def test_defaults_follow_name_prefix():
    assert Service("getRSS", "/rss").config.method == "GET"
    for name, method in (("addMember", "POST"), ("updateProfile", "PUT"), ("deleteItem", "DELETE")):
        config = Service(name, "/x").config
        assert config.method == method
        assert config.cache is False
        assert config.retry == 0


def test_explicit_configuration_wins():
    config = Service("getRSS", "/rss", {"cacheExpiry": 60}, retry=3, method="post").config
    assert config.method == "POST"
    assert config.cache is False
    assert config.retry == 3
    assert config.cache_expiry == 60


def test_deprecated_json_flag():
    assert Service("getPage", "/page", json=False).config.format == "text"


@pytest.mark.parametrize("options", [
    {"method": "PATCH"},
    {"cache": "yes"},
    {"format": "xml"},
    {"retry": -1},
    {"unknown": True},
])
def test_invalid_configuration(options):
    with pytest.raises(ConfigurationError):
        Service("getRSS", "/rss", options)


@pytest.mark.parametrize("name,uri", [(None, "/x"), ("", "/x"), ("getX", None), ("getX", "")])
def test_name_and_uri_are_required(name, uri):
    with pytest.raises(ConfigurationError):
        Service(name, uri)


def test_invoke_fills_uri_template_and_delivers(runtime, transport):
    transport.outcomes.append(("ok", '{"items": [1, 2]}'))
    caller = EchoCommand()
    service = Service("getFeed", "/json/feeds/${feed}", runtime=runtime)

    service.invoke({"feed": "cnn", "page": 2}, caller)

    assert transport.calls == [("GET", "/json/feeds/cnn", {"feed": "cnn", "page": 2})]
    assert caller.responses == [{"items": [1, 2]}]


def test_responses_are_cached_in_the_model(runtime, transport):
    transport.outcomes.append(("ok", {"items": [1]}))
    caller = EchoCommand()
    service = Service("getFeed", "/json/feed", runtime=runtime)

    service.invoke({"id": 1}, caller)
    service.invoke({"id": 1}, caller)

    assert len(transport.calls) == 1
    assert caller.responses == [{"items": [1]}, {"items": [1]}]
    assert runtime.model.get("getFeed_id_1")["data"] == {"items": [1]}


def test_cache_entries_expire(runtime, transport, monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr("mojokit.service.service.time.time", lambda: clock[0])
    transport.outcomes.extend([("ok", {"v": 1}), ("ok", {"v": 2})])
    caller = EchoCommand()
    service = Service("getFeed", "/json/feed", cache_expiry=60, runtime=runtime)

    service.invoke({}, caller)
    clock[0] += 30
    service.invoke({}, caller)
    clock[0] += 61
    service.invoke({}, caller)

    assert len(transport.calls) == 2
    assert caller.responses == [{"v": 1}, {"v": 1}, {"v": 2}]


def test_uncached_get_busts_caches(runtime, transport):
    transport.outcomes.append(("ok", "<p>hi</p>"))
    caller = EchoCommand()
    Service("getFragment", "/html/fragment", format="text", cache=False, runtime=runtime).invoke({}, caller)

    assert transport.calls[0][1].startswith("/html/fragment?preventCache=")
    assert caller.responses == ["<p>hi</p>"]


def test_http_errors_are_retried(runtime, transport):
    transport.outcomes.extend([("error", "timeout", 503), ("ok", {"ok": True})])
    caller = EchoCommand()

    Service("getFeed", "/json/feed", runtime=runtime).invoke({}, caller)

    assert len(transport.calls) == 2
    assert caller.responses == [{"ok": True}]
    assert caller.errors == []


def test_errors_after_retries_reach_on_error(runtime, transport):
    transport.outcomes.extend([("error", "timeout", 503), ("error", {"message": "down"}, 500)])
    caller = EchoCommand()

    Service("getFeed", "/json/feed", runtime=runtime).invoke({}, caller)

    assert len(transport.calls) == 2
    assert caller.errors == [[{"message": "down", "code": 500}]]


def test_error_payloads_are_not_retried(runtime, transport):
    transport.outcomes.append(("ok", {"errors": [{"message": "invalid member"}]}))
    caller = EchoCommand()

    Service("getMember", "/json/member", runtime=runtime).invoke({}, caller)

    assert len(transport.calls) == 1
    assert caller.errors == [[{"message": "invalid member"}]]
    assert not runtime.model.contains("getMember")


def test_unparseable_json_is_an_error(runtime, transport):
    transport.outcomes.append(("ok", "{not json"))
    caller = EchoCommand()

    Service("getFeed", "/json/feed", runtime=runtime).invoke({}, caller)

    assert caller.errors[0][0]["code"] == "JSONDecodeError"


def test_hijax_uses_link_href(runtime, transport):
    transport.outcomes.append(("ok", "page"))
    link = Element("a", {"href": "/articles/42"})
    service = Service("getArticle", "/articles/${id}", format="text", hijax=True, runtime=runtime)

    class LoadArticle(EchoCommand):
        def execute(self, request):
            service.invoke(request.get_params(), self)

    command = LoadArticle()
    command.dispatch(Request(link, "Load", Controller(runtime=runtime), params={"id": 7}))

    assert transport.calls[0][1] == "/articles/42"
    assert command.responses == ["page"]


def test_invoke_validates_caller(runtime, transport):
    service = Service("getFeed", "/json/feed", runtime=runtime)
    with pytest.raises(ConfigurationError):
        service.invoke({}, None)
    with pytest.raises(ConfigurationError):
        service.invoke({}, Behavior())


def test_invoke_requires_transport(runtime):
    with pytest.raises(ConfigurationError):
        Service("getFeed", "/json/feed", runtime=runtime).invoke({}, EchoCommand())


def test_configure_updates_options():
    service = Service("getFeed", "/json/feed")
    service.configure(cache=False, retry=2)
    assert service.config.cache is False
    assert service.config.retry == 2
    assert service.config.format == "json"


class SampleLocator(Locator):
    def add_services(self):
        self.add_service(Service("getRSS", "/json/rssFeed", format="json", cache=True))
        self.add_service(Service("updateProfile", "/json/members/${member_id}/profile"))


def test_locator_registers_services_once(runtime):
    locator = SampleLocator.get_instance(runtime)

    assert SampleLocator.get_instance(runtime) is locator
    assert locator.get_service("getRSS").runtime is runtime
    assert locator.get_service("updateProfile").config.method == "PUT"
    assert locator.get_service("missing") is None
    assert SampleLocator(runtime).get_service("getRSS") is locator.get_service("getRSS")


def test_locator_rejects_duplicates_and_non_services(runtime):
    locator = SampleLocator(runtime)
    with pytest.raises(ConfigurationError):
        locator.add_service(Service("getRSS", "/other"))
    with pytest.raises(ConfigurationError):
        locator.add_service("getRSS")
    with pytest.raises(ConfigurationError):
        locator.get_service("")
