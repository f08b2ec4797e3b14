"""Tests for route authentication gating."""

from smartnav import EventBus, MemoryHistory, PendingRouteStore, Router
from smartnav.core.auth import is_allowed


class RecordingBus(EventBus):
    __slots__ = ("events",)

    def __init__(self):
        super().__init__()
        self.events = []

    def emit(self, name, *args):
        self.events.append(name)
        super().emit(name, *args)


def declare(router, calls):
    router.route("home", path="/", action=lambda: calls.append(("home",)))
    router.route(
        "admin",
        path="/admin",
        authed=True,
        before=["admin:before"],
        action=lambda: calls.append(("admin",)),
        after=["admin:after"],
    )
    router.route("signup", path="/signup", authed=False, action=lambda: calls.append(("signup",)))
    router.route("403", action=lambda path: calls.append(("403", path)))
    router.route("login", action=lambda: calls.append(("login",)))


def test_is_allowed_truth_table():
    assert is_allowed(None, False) and is_allowed(None, True)
    assert is_allowed(True, True) and not is_allowed(True, False)
    assert is_allowed(False, False) and not is_allowed(False, True)


def test_authed_route_while_logged_out_dispatches_403_only():
    calls = []
    bus = RecordingBus()
    router = Router(history=MemoryHistory(), dispatcher=bus)
    declare(router, calls)
    router.start()

    assert router.go("admin") is True
    assert calls == [("home",), ("403", "admin")]
    assert bus.events == []
    assert router.current_path() == "admin"


def test_authed_route_runs_when_logged_in():
    calls = []
    bus = RecordingBus()
    router = Router(history=MemoryHistory(), dispatcher=bus, authed=True)
    declare(router, calls)
    router.start()
    router.go("admin")
    assert calls[-1] == ("admin",)
    assert bus.events == ["admin:before", "admin:after"]


def test_guest_only_route_is_forbidden_when_logged_in():
    calls = []
    router = Router(history=MemoryHistory(), dispatcher=RecordingBus(), authed=True)
    declare(router, calls)
    router.start()
    router.go("signup")
    assert calls[-1] == ("403", "signup")


def test_session_flag_can_change_at_runtime():
    calls = []
    router = Router(history=MemoryHistory(), dispatcher=RecordingBus())
    declare(router, calls)
    router.start()
    router.process_controllers("admin")
    router.options.authed = True
    router.process_controllers("admin")
    assert calls[1:] == [("403", ""), ("admin",)]


def test_redirect_to_login_stores_pending_path():
    calls = []
    store = PendingRouteStore()
    router = Router(
        history=MemoryHistory(), dispatcher=RecordingBus(), store=store, redirect_to_login=True
    )
    declare(router, calls)
    router.start()
    router.go("admin")

    assert calls == [("home",), ("login",)]
    assert store.get() == "admin"
    assert router.get_stored_route() == "admin"


def test_redirect_to_login_does_not_apply_when_logged_in():
    calls = []
    router = Router(
        history=MemoryHistory(), dispatcher=RecordingBus(), authed=True, redirect_to_login=True
    )
    declare(router, calls)
    router.start()
    router.go("signup")
    assert calls[-1] == ("403", "signup")
    assert router.get_stored_route() is None


def test_pending_route_is_resumed_on_next_start():
    backend = {}
    first_calls = []
    first = Router(
        history=MemoryHistory(), dispatcher=RecordingBus(), store=backend, redirect_to_login=True
    )
    declare(first, first_calls)
    first.start()
    first.go("admin")
    assert backend == {"smartnav:path": "admin"}

    second_calls = []
    second = Router(history=MemoryHistory(), dispatcher=RecordingBus(), store=backend)
    declare(second, second_calls)
    second.start(authed=True)

    assert second_calls == [("home",), ("admin",)]
    assert backend == {}
    assert second.current_path() == "admin"


def test_alias_delegates_to_target_auth_gate():
    calls = []
    router = Router(history=MemoryHistory(), dispatcher=RecordingBus())
    declare(router, calls)
    router.route("dashboard", path="/dashboard", action="admin")
    router.start()
    router.go("dashboard")
    assert calls[-1] == ("403", "dashboard")
    assert ("admin",) not in calls
