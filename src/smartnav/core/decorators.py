"""Decorator helpers for declaring routes on controller classes.

``route(name, *, path=None, authed=None, before=None, after=None, close=None)``
stores a marker dict on the function under ``TARGET_ATTR_NAME``; nothing is
registered at decoration time. ``Router.map(controller)`` later walks the
controller's class and registers each marked method as the route action,
bound to the controller instance. Several markers may stack on one function,
which declares the same action under several route names.

``close`` may be a callable or the name of a method on the controller.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

__all__ = ["route", "TARGET_ATTR_NAME", "iter_marked_methods"]

TARGET_ATTR_NAME = "__smartnav_routes__"


def route(
    name: str,
    *,
    path: Optional[str] = None,
    authed: Optional[bool] = None,
    before: Any = None,
    after: Any = None,
    close: Any = None,
) -> Callable:
    """Mark a controller method as the action of route ``name``."""

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, TARGET_ATTR_NAME, []))
        payload: Dict[str, Any] = {"name": name}
        for key, value in (
            ("path", path),
            ("authed", authed),
            ("before", before),
            ("after", after),
            ("close", close),
        ):
            if value is not None:
                payload[key] = value
        markers.append(payload)
        setattr(func, TARGET_ATTR_NAME, markers)
        return func

    return decorator


def iter_marked_methods(owner: Any) -> Iterator[Tuple[Callable, Dict[str, Any]]]:
    """Yield ``(function, marker)`` pairs in declaration order.

    Base classes come first; a method overridden in a subclass keeps the base
    position but uses the subclass function (and its markers).
    """
    methods: Dict[str, Callable] = {}
    for base in reversed(type(owner).__mro__):
        for attr_name, value in vars(base).items():
            if inspect.isfunction(value):
                methods[attr_name] = value
    for func in methods.values():
        for marker in getattr(func, TARGET_ATTR_NAME, None) or ():
            yield func, dict(marker)
