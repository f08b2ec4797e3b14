"""Tests for map(): definer callables and @route marked controllers."""

from smartnav import EventBus, MemoryHistory, Router, route


class UsersController:
    def __init__(self):
        self.calls = []
        self.dirty = False

    @route("users", path="/users")
    def index(self):
        self.calls.append("index")

    @route("user_edit", path="/users/:id/edit", authed=True, close="confirm_leave")
    def edit(self, ident):
        self.calls.append(("edit", ident))

    @route("profile", path="/me")
    @route("account", path="/account")
    def profile(self):
        self.calls.append("profile")

    def confirm_leave(self, target, args, options):
        return not self.dirty


def make_router(**options):
    return Router(history=MemoryHistory(), dispatcher=EventBus(), **options)


def test_map_registers_marked_methods():
    controller = UsersController()
    router = make_router(authed=True)
    assert router.map(controller) is router
    assert set(router.registry.names()) == {"users", "user_edit", "profile", "account"}
    assert router.path("user_edit") == "users/:id/edit"

    router.start()
    router.go("user_edit", ["3"])
    router.go("account")
    assert controller.calls == [("edit", "3"), "profile"]


def test_map_resolves_close_guard_by_method_name():
    controller = UsersController()
    router = make_router(authed=True).map(controller)
    router.start()
    router.go("user_edit", ["3"])

    controller.dirty = True
    assert router.go("users") is False
    assert router.current_path() == "users/3/edit"

    controller.dirty = False
    assert router.go("users") is True
    assert controller.calls[-1] == "index"


def test_map_subclass_override_keeps_single_registration():
    class AdminUsers(UsersController):
        @route("users", path="/admin/users")
        def index(self):
            self.calls.append("admin-index")

    router = make_router().map(AdminUsers())
    assert router.path("users") == "admin/users"
    assert router.members()["users"]["handlers"] == 1


def test_map_calls_definer_functions():
    seen = []

    def define(router):
        router.route("home", path="/", action=lambda: seen.append("home"))
        router.route("about", path="/about")

    router = make_router().map(define)
    assert router.exists(name="home")
    assert router.exists(name="about")
    router.start()
    assert seen == ["home"]


def test_map_rejects_invalid_definer():
    messages = []
    router = make_router(log=messages.append)
    router.map(42)
    assert messages == ["[smartnav.map] Missing routes definer as the first param"]
    assert router.registry.names() == ()
