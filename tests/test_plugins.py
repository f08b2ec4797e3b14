"""Tests for the plugin pipeline and the bundled plugins."""

import pytest
from pydantic import ValidationError

# Import to trigger plugin registration
import smartnav.plugins.logging  # noqa: F401
import smartnav.plugins.pydantic  # noqa: F401
from smartnav import MemoryHistory, Router
from smartnav.plugins._base_plugin import BasePlugin


class DummyLogger:
    def __init__(self):
        self.records = []

    def has_handlers(self):
        return True

    def info(self, message):
        self.records.append(message)


def make_router(**options):
    return Router(history=MemoryHistory(), **options)


def test_logging_plugin_wraps_route_actions():
    calls = []
    router = make_router().plug("logging")
    logger = DummyLogger()
    router.logging._logger = logger  # type: ignore[attr-defined]
    router.route("home", path="/home", action=lambda: calls.append("home"))

    router.process_controllers("home")
    assert calls == ["home"]
    assert logger.records[0] == "home start"
    assert logger.records[1].startswith("home end (")


def test_logging_plugin_flags_and_per_route_override():
    router = make_router().plug("logging", flags="before:off")
    logger = DummyLogger()
    router.logging._logger = logger  # type: ignore[attr-defined]
    router.route("a", action=lambda: None)
    router.route("b", action=lambda: None)
    router.logging.configure(_target="b", enabled=False)  # type: ignore[attr-defined]

    router.process_controllers("a")
    router.process_controllers("b")
    assert len(logger.records) == 1
    assert logger.records[0].startswith("a end")
    assert router.is_plugin_enabled("b", "logging") is False
    assert router.get_config("logging", "a")["before"] is False


def test_logging_plugin_print_sink(capsys):
    router = make_router().plug("logging", print=True, after=False)
    router.route("hello", action=lambda: None)
    router.process_controllers("hello")
    assert capsys.readouterr().out == "hello start\n"


def test_logging_plugin_reports_arguments_on_request():
    router = make_router().plug("logging", flags="args:on,after:off")
    logger = DummyLogger()
    router.logging._logger = logger  # type: ignore[attr-defined]
    router.route("user", action=lambda ident: None)
    router.process_controllers("user", ["42"])
    assert logger.records == ["user start ['42']"]


def test_logging_plugin_falls_back_to_router_sink():
    class SilentLogger(DummyLogger):
        def has_handlers(self):
            return False

    messages = []
    router = make_router(log=messages.append).plug("logging", after=False)
    router.logging._logger = SilentLogger()  # type: ignore[attr-defined]
    router.route("home", action=lambda: None)
    router.process_controllers("home")
    assert messages[-1] == "home start"


def test_logging_plugin_does_not_wrap_engine_steps():
    router = make_router().plug("logging")
    logger = DummyLogger()
    router.logging._logger = logger  # type: ignore[attr-defined]
    router.route("target", action=lambda: None)
    router.route("alias", action="target")
    router.process_controllers("alias")
    assert logger.records[0] == "target start"
    assert len(logger.records) == 2


def test_pydantic_plugin_coerces_url_parameters():
    seen = []

    def show(user_id: int, tab: str = "info"):
        seen.append((user_id, tab))

    router = make_router().plug("pydantic")
    router.route("user", path="/user/:id(/:tab)", action=show)
    router.start()
    router.go(path="user/42")
    router.go(path="user/7/posts")
    assert seen == [(42, "info"), (7, "posts")]


def test_pydantic_plugin_rejects_invalid_parameters():
    def show(user_id: int):
        return user_id

    router = make_router().plug("pydantic")
    router.route("user", action=show)
    with pytest.raises(ValidationError):
        router.process_controllers("user", ["abc"])


def test_pydantic_plugin_can_be_disabled():
    seen = []

    def strict(value: int):
        seen.append(value)

    def lenient(value: int):
        seen.append(value)

    router = make_router().plug("pydantic")
    router.route("strict", action=strict)
    router.route("lenient", action=lenient)
    router.pydantic.configure(_target="lenient", disabled=True)  # type: ignore[attr-defined]

    router.process_controllers("lenient", ["abc"])
    with pytest.raises(ValidationError):
        router.process_controllers("strict", ["abc"])

    router.pydantic.configure(disabled=True)  # type: ignore[attr-defined]
    router.process_controllers("strict", ["xyz"])
    assert seen == ["abc", "xyz"]


def test_plugin_attached_after_routes_applies_to_existing_actions():
    seen = []

    def count(amount: int):
        seen.append(amount)

    router = make_router()
    router.route("count", action=count)
    router.process_controllers("count", ["3"])
    router.plug("pydantic")
    router.process_controllers("count", ["3"])
    assert seen == ["3", 3]


def test_plugins_wrap_in_attachment_order():
    order = []

    class Outer(BasePlugin):
        plugin_code = "outer_test"

        def wrap_handler(self, router, entry, call_next):
            def wrapper(*args):
                order.append("outer")
                return call_next(*args)

            return wrapper

    class Inner(BasePlugin):
        plugin_code = "inner_test"

        def wrap_handler(self, router, entry, call_next):
            def wrapper(*args):
                order.append("inner")
                return call_next(*args)

            return wrapper

    Router.register_plugin(Outer)
    Router.register_plugin(Inner)
    router = make_router().plug("outer_test").plug("inner_test")
    router.route("x", action=lambda: order.append("action"))
    router.process_controllers("x")
    assert order == ["outer", "inner", "action"]
    assert [plugin.name for plugin in router.iter_plugins()] == ["outer_test", "inner_test"]


def test_plugin_registry_errors():
    router = make_router()
    with pytest.raises(ValueError):
        router.plug("missing")
    with pytest.raises(TypeError):
        router.plug(object())  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Router.register_plugin(object)  # type: ignore[arg-type]

    class NoCode(BasePlugin):
        pass

    with pytest.raises(ValueError):
        Router.register_plugin(NoCode)

    class Duplicate(BasePlugin):
        plugin_code = "logging"

    with pytest.raises(ValueError):
        Router.register_plugin(Duplicate)
    with pytest.raises(AttributeError):
        router.logging  # noqa: B018
    assert "logging" in Router.available_plugins()


def test_members_include_plugin_metadata():
    def show(user_id: int):
        return user_id

    router = make_router().plug("pydantic")
    router.route("user", path="/user/:id", action=show)
    info = router.members()["user"]["plugins"][0]["pydantic"]
    assert info["config"] == {"enabled": True}
    assert info["metadata"]["hints"] == {"user_id": int}
