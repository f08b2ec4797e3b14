"""SmartNav public API surface.

A client-side navigation engine: named routes bound to handler chains,
authentication gating, before/after triggers, aliases and close guards, on
top of a pluggable history facility.

Built-in plugins (``logging``, ``pydantic``) are imported at package import through
``import_module`` for their self-registration side effect.
"""

from importlib import import_module

__version__ = "0.3.0"

from .core import (
    AliasTo,
    BaseRouter,
    ConfigurationError,
    DetailedTrigger,
    EventBus,
    Invoke,
    MemoryHistory,
    NamedTrigger,
    PendingRouteStore,
    RouteDefinition,
    Router,
    RouterOptions,
    SmartNavError,
    default_router,
    route,
)

for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "AliasTo",
    "BaseRouter",
    "ConfigurationError",
    "DetailedTrigger",
    "EventBus",
    "Invoke",
    "MemoryHistory",
    "NamedTrigger",
    "PendingRouteStore",
    "RouteDefinition",
    "Router",
    "RouterOptions",
    "SmartNavError",
    "default_router",
    "route",
]
