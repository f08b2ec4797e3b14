"""Core runtime aggregator.

Exposes the engine building blocks from one module; importing it performs no
plugin registration and creates no router.
"""

from .base_router import BaseRouter
from .decorators import route
from .definitions import (
    AliasTo,
    DetailedTrigger,
    Invoke,
    NamedTrigger,
    RouteDefinition,
)
from .errors import ConfigurationError, SmartNavError
from .events import EventBus, EventDispatcher
from .history import HistoryFacility, MemoryHistory
from .options import RouterOptions
from .router import Router, default_router
from .storage import PendingRouteStore

__all__ = [
    "AliasTo",
    "BaseRouter",
    "ConfigurationError",
    "DetailedTrigger",
    "EventBus",
    "EventDispatcher",
    "HistoryFacility",
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
