"""Event dispatcher capability and the default in-process aggregator.

Triggers that do not name a route are handed to an *event dispatcher*: any
object exposing ``emit(name, *args)``. ``as_dispatcher`` adapts objects that
only expose ``trigger(name, *args)`` (event-aggregator objects) and returns
``None`` for anything else. ``EventBus`` is the default aggregator; the
module-level ``default_bus`` is used when the host supplies none.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

__all__ = ["EventDispatcher", "EventBus", "as_dispatcher", "default_bus"]

logger = logging.getLogger("smartnav.events")


@runtime_checkable
class EventDispatcher(Protocol):
    def emit(self, name: str, *args: Any) -> Any: ...


class EventBus:
    """Minimal synchronous publish/subscribe aggregator."""

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}

    def on(self, name: str, callback: Callable[..., Any]) -> "EventBus":
        self._listeners.setdefault(name, []).append(callback)
        return self

    def off(self, name: Optional[str] = None, callback: Optional[Callable] = None) -> "EventBus":
        """Remove listeners: all, all for ``name``, or one ``callback``."""
        if name is None:
            self._listeners = {}
        elif callback is None:
            self._listeners.pop(name, None)
        else:
            remaining = [cb for cb in self._listeners.get(name, []) if cb is not callback]
            if remaining:
                self._listeners[name] = remaining
            else:
                self._listeners.pop(name, None)
        return self

    def emit(self, name: str, *args: Any) -> None:
        listeners = list(self._listeners.get(name, ()))
        logger.debug("emit %s to %d listener(s)", name, len(listeners))
        for callback in listeners:
            callback(*args)

    trigger = emit

    def listeners(self, name: str) -> List[Callable[..., Any]]:
        return list(self._listeners.get(name, ()))


class _TriggerAdapter:
    __slots__ = ("target",)

    def __init__(self, target: Any) -> None:
        self.target = target

    def emit(self, name: str, *args: Any) -> Any:
        return self.target.trigger(name, *args)


def as_dispatcher(candidate: Any) -> Optional[EventDispatcher]:
    if candidate is None:
        return None
    if callable(getattr(candidate, "emit", None)):
        return candidate
    if callable(getattr(candidate, "trigger", None)):
        return _TriggerAdapter(candidate)
    return None


default_bus = EventBus()
