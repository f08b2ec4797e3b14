"""Router session/options model.

Validated with pydantic on construction *and* on assignment, so runtime
changes such as ``router.options.authed = True`` after a login are checked the
same way as startup configuration.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

__all__ = ["RouterOptions", "NAVIGATE_DEFAULTS"]

NAVIGATE_DEFAULTS = {"trigger": True, "replace": False}


class RouterOptions(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    push_state: bool = True
    authed: bool = False
    redirect_to_login: bool = False
    root: str = ""
    debug: bool = False
    strict: bool = False
    log: Optional[Callable[[str], Any]] = None

    def update(self, **changes: Any) -> "RouterOptions":
        for key, value in changes.items():
            setattr(self, key, value)
        return self
