"""Auth gate run at the start of every handler-chain entry.

``is_allowed(required, authed)`` is the pure check: an unset requirement
always passes, otherwise it must equal the session flag. ``AuthGate.check``
adds the failure protocol:

- redirect-to-login enabled and session logged out: store the current path
  in the pending-route store, dispatch the ``login`` route by name;
- otherwise dispatch ``403`` by name with the raw current path.

A failed check returns ``False`` and the entry stops there: no before
triggers, no action, no after triggers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .definitions import RouteDefinition

if TYPE_CHECKING:  # pragma: no cover
    from .base_router import BaseRouter

__all__ = ["AuthGate", "is_allowed", "LOGIN_ROUTE", "FORBIDDEN_ROUTE"]

LOGIN_ROUTE = "login"
FORBIDDEN_ROUTE = "403"


def is_allowed(required: Optional[bool], authed: bool) -> bool:
    return required is None or bool(required) == bool(authed)


class AuthGate:
    __slots__ = ("_router",)

    def __init__(self, router: "BaseRouter") -> None:
        self._router = router

    def check(self, name: str, definition: RouteDefinition) -> bool:
        router = self._router
        options = router.options
        if is_allowed(definition.authed, options.authed):
            return True
        if options.redirect_to_login and not options.authed:
            router.log("[smartnav] Secured page, redirecting to login")
            router.store_current_route()
            router.process_controllers(LOGIN_ROUTE)
        else:
            router.log(
                "[smartnav] Skipping route '%s', %slogged in",
                name,
                "" if options.authed else "not ",
            )
            router.process_controllers(FORBIDDEN_ROUTE, [router.current_path()])
        return False
