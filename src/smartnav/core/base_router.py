"""Plugin-free navigation engine (source of truth).

The module exposes :class:`BaseRouter`, which owns a route registry, a trigger
cache and the list of routes run by the last navigation, and drives an
external history facility. Subclasses add middleware around route actions but
must preserve these semantics.

Constructor
-----------
::

    BaseRouter(*, history=None, store=None, dispatcher=None, **options)

- ``history``: history facility (default :class:`MemoryHistory`).
- ``store``: :class:`PendingRouteStore` or a ``MutableMapping`` backend.
- ``dispatcher``: event dispatcher for non-route triggers (see ``start``).
- ``options``: :class:`RouterOptions` fields (``authed``, ``redirect_to_login``,
  ``push_state``, ``root``, ``debug``, ``strict``, ``log``).

Declaration
-----------
``route(name, definition=None, **fields)`` normalises the definition, reports
problems (log, or ``ConfigurationError`` when ``strict``), wraps it in a
handler-chain entry and registers it. Empty definitions still register a
no-op placeholder. Routes declared after ``start()`` are compiled and bound
immediately. ``map(definer)`` calls ``definer(router)``, or registers the
``@route`` marked methods of a controller object.

Handler-chain entry
-------------------
``entry(args, from_trigger)`` runs, in order:

1. record the route name in ``current_routes`` unless trigger-originated;
2. auth gate (failure stops the entry);
3. alias: delegate to the target chain as trigger-originated and stop;
4. ``before`` triggers, the action (through ``_wrap_handler`` layers),
   ``after`` triggers.

Navigation
----------
``go(name=None, args=None, options=None, *, path=None)``:

- Resolving: ``name`` may be a mapping ``{name|path, args}``. A path is used
  verbatim without its leading ``/``; a name is resolved to its template and
  ``args`` are injected with ``parse``. Unknown name or unmatched path
  dispatches ``404`` with the raw current path and returns ``False``.
- Guarding: every route in ``current_routes`` other than the target with a
  close guard is called as ``guard(target_name, args, options)``; each result
  overwrites the verdict and a falsy verdict (``None`` included) cancels
  (return ``False``, nothing mutated).
- Committing: ``current_routes`` is reset, options are merged with
  ``{"trigger": True, "replace": False}`` and the path goes to
  ``history.navigate``. Pathless routes have nothing to navigate and are
  dispatched directly. Returns ``True``.

Startup
-------
``start(app=None, *, dispatcher=None, **options)`` selects the dispatcher
(explicit, ``app.vent``, ``app``, global bus), compiles the registry, binds
each owning chain to the history facility and starts it when needed. An
unmatched initial path dispatches ``404``; otherwise a pending route left by
the auth gate is cleared and resumed with ``go(path=...)``.

Invariants
----------
- No public entry point raises for routing failures; only ``strict`` mode
  raises ``ConfigurationError`` and user callables propagate their own errors.
- Every registered name has exactly one handler chain.
- Bound matchers exist only on owning chains.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Union

from smartseeds import SmartOptions

from smartnav.plugins._base_plugin import RouteEntry

from .auth import AuthGate
from .cache import TriggerCache
from .decorators import iter_marked_methods
from .definitions import (
    AliasTo,
    HandlerChain,
    Invoke,
    RouteDefinition,
    build_definition,
    normalize_args,
    strip_leading_slash,
)
from .errors import ConfigurationError
from .events import EventBus, EventDispatcher, as_dispatcher, default_bus
from .history import HistoryFacility, MemoryHistory
from .options import NAVIGATE_DEFAULTS, RouterOptions
from .parser import extract_parameters, parse
from .registry import RouteRegistry
from .storage import PendingRouteStore
from .triggers import TriggerPipeline

__all__ = ["BaseRouter", "NOT_FOUND_ROUTE"]

NOT_FOUND_ROUTE = "404"

logger = logging.getLogger("smartnav")


class BaseRouter:
    """Route registry + dispatch pipeline bound to one history facility."""

    __slots__ = (
        "options",
        "registry",
        "cache",
        "history",
        "store",
        "current_routes",
        "_entries",
        "_dispatcher",
        "_events",
        "_started",
        "_triggers",
        "_auth",
    )

    def __init__(
        self,
        *,
        history: Optional[HistoryFacility] = None,
        store: Union[PendingRouteStore, MutableMapping[str, str], None] = None,
        dispatcher: Any = None,
        **options: Any,
    ) -> None:
        self.options = RouterOptions(**options)
        self.registry = RouteRegistry()
        self.cache = TriggerCache()
        self.history: HistoryFacility = history if history is not None else MemoryHistory()
        self.store = store if isinstance(store, PendingRouteStore) else PendingRouteStore(store)
        self.current_routes: List[str] = []
        self._entries: List[RouteEntry] = []
        self._dispatcher: Optional[EventDispatcher] = as_dispatcher(dispatcher)
        self._events = EventBus()
        self._started = False
        self._triggers = TriggerPipeline(self)
        self._auth = AuthGate(self)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def log(self, message: str, *args: Any) -> None:
        sink = self.options.log
        if sink is not None:
            sink(message % args if args else message)
            return
        logger.log(logging.INFO if self.options.debug else logging.DEBUG, message, *args)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher if self._dispatcher is not None else default_bus

    @dispatcher.setter
    def dispatcher(self, value: Any) -> None:
        dispatcher = as_dispatcher(value)
        if dispatcher is None:
            raise TypeError("dispatcher must expose emit(name, *args) or trigger(name, *args)")
        self._dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def start(self, app: Any = None, *, dispatcher: Any = None, **options: Any) -> bool:
        """Compile routes, bind them to the history facility and start it."""
        if options:
            self.options.update(**options)

        candidate = dispatcher if dispatcher is not None else self._dispatcher
        if candidate is None and app is not None:
            vent = getattr(app, "vent", None)
            candidate = vent if vent is not None else app
        found = as_dispatcher(candidate) if candidate is not None else default_bus
        if found is None:
            self.log("[smartnav.start] Could not start router, missing dispatcher instance")
            return False
        self._dispatcher = found

        if self._started:
            self.log("[smartnav.start] Router already started")
            return False

        self.log("[smartnav.start] Starting router")
        for chain in self.registry.compile():
            self._bind(chain)
        self._started = True

        if self.history.started:
            return True

        root = self.options.root
        self.log(
            "[smartnav.start] Starting history (%s)",
            f"root: {root}" if root else "empty root url",
        )
        existing = self.history.start(root=root, push_state=self.options.push_state)
        if not existing:
            self.log("[smartnav.start] Unknown initial route")
            self.process_controllers(NOT_FOUND_ROUTE, [self.current_path()])
            return True

        stored = self.get_stored_route()
        if stored:
            self.log("[smartnav.start] Loaded stored route: %s", stored)
            self.clear_store()
            self.go(path=stored)
        return True

    def _bind(self, chain: HandlerChain) -> None:
        name = chain.name
        matcher = chain.matcher
        if matcher is None:  # pragma: no cover - compile() always sets it
            return

        def on_match(fragment: str) -> None:
            args = extract_parameters(matcher, fragment) or []
            self.process_controllers(name, args)
            self._events.emit(f"route:{name}", *args)
            self._events.emit("route", name, args)

        self.history.route(matcher, on_match)

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------
    def map(self, definer: Any) -> "BaseRouter":
        """Declare routes through ``definer(router)`` or a marked controller."""
        markers = [] if inspect.isroutine(definer) else list(iter_marked_methods(definer))
        if markers:
            for func, marker in markers:
                name = marker.pop("name")
                close = marker.get("close")
                if isinstance(close, str):
                    marker["close"] = getattr(definer, close)
                marker["action"] = func.__get__(definer, type(definer))
                self.route(name, marker)
        elif callable(definer):
            definer(self)
        else:
            self.log("[smartnav.map] Missing routes definer as the first param")
        return self

    def route(self, name: str, definition: Any = None, **fields: Any) -> "BaseRouter":
        """Declare route ``name``.

        Args:
            name: Unique route name (e.g. ``"user_edit"``).
            definition: Mapping with ``path``, ``authed``, ``before``,
                ``action``, ``after``, ``close`` or a ``RouteDefinition``.
            fields: Same keys as keyword arguments; merged over ``definition``.

        Raises:
            ConfigurationError: only with ``strict=True``, on a malformed
                definition.
        """
        if fields:
            definition = {**definition, **fields} if isinstance(definition, Mapping) else fields
        route_definition, problems = build_definition(definition)

        if not isinstance(name, str) or not name:
            self._report(f"[smartnav.route] Invalid route name {name!r}, route ignored")
            return self
        owned = self.registry.owned_path(name)
        if route_definition.path is not None and owned not in (None, route_definition.path):
            problems.append(
                f"already bound to path '{owned}', path '{route_definition.path}' is never matched"
            )
        if problems:
            self._report(f"[smartnav.route] Route '{name}': " + "; ".join(problems))

        entry = self._make_entry(name, route_definition)
        chain = self.registry.register(name, route_definition, entry)
        if self._started and route_definition.path is not None and chain.matcher is None:
            self._bind(self.registry.compile_binding(route_definition.path))
        return self

    def _report(self, message: str) -> None:
        if self.options.strict:
            raise ConfigurationError(message)
        self.log(message)

    def _make_entry(self, name: str, definition: RouteDefinition) -> Callable[..., bool]:
        action = definition.action
        route_entry: Optional[RouteEntry] = None
        if isinstance(action, Invoke):
            route_entry = RouteEntry(
                name=name, func=action.func, router=self, definition=definition
            )
            self._register_entry(route_entry)

        def controller(args: List[Any], from_trigger: bool = False) -> bool:
            if not from_trigger:
                self.current_routes.append(name)

            if not self._auth.check(name, definition):
                return False

            if isinstance(action, AliasTo):
                self.log("[smartnav] Caught alias route: '%s' >> '%s'", name, action.target)
                self.process_controllers(action.target, args, trigger=True)
                return False

            self.log("[smartnav] Executing route named '%s'", name)
            if definition.before:
                self.process_triggers(definition.before)
            if route_entry is not None:
                route_entry.handler(*args)
            if definition.after:
                self.process_triggers(definition.after)
            return True

        return controller

    # ------------------------------------------------------------------
    # Action wrapping (plugin hooks)
    # ------------------------------------------------------------------
    def _register_entry(self, entry: RouteEntry) -> None:
        self._entries.append(entry)
        self._after_entry_registered(entry)
        entry.handler = self._wrap_handler(entry, entry.func)

    def _rebuild_handlers(self) -> None:
        for entry in self._entries:
            entry.handler = self._wrap_handler(entry, entry.func)

    def _wrap_handler(
        self, entry: RouteEntry, call_next: Callable
    ) -> Callable:  # pragma: no cover - overridden by plugin routers
        return call_next

    def _after_entry_registered(
        self, entry: RouteEntry
    ) -> None:  # pragma: no cover - hook for subclasses
        return None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def process_controllers(self, name: str, args: Any = None, trigger: bool = False) -> bool:
        """Run every entry of ``name``'s handler chain in registration order."""
        chain = self.registry.chain(name)
        if chain is None:
            self.log("[smartnav] No route named '%s'", name)
            return False
        values = normalize_args(args)
        for entry in list(chain.entries):
            entry(values, trigger)
        return True

    def process_triggers(self, triggers: Any) -> None:
        self._triggers.process_triggers(triggers)

    def process_trigger(self, trigger: Any) -> bool:
        return self._triggers.process_trigger(trigger)

    def clear_cache(self) -> None:
        self.cache.clear()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def go(
        self,
        name: Any = None,
        args: Any = None,
        options: Optional[Dict[str, Any]] = None,
        *,
        path: Optional[str] = None,
    ) -> bool:
        """Navigate to a named route or a literal path.

        Returns False when the route is unknown or a close guard cancelled
        the navigation, True otherwise.
        """
        if isinstance(name, Mapping):
            request = name
            name = request.get("name")
            path = request.get("path", path)
            args = request.get("args") or args
        path = strip_leading_slash(path)

        if not name and path is None:
            self.log("[smartnav.go] Missing parameters, name or path is necessary")
            return False

        if (name and not self.exists(name=name)) or (
            path is not None and not self.exists(path=path)
        ):
            self.log("[smartnav.go] Unknown route: %s", name or path)
            self.process_controllers(NOT_FOUND_ROUTE, [self.current_path()])
            return False

        if path is None:
            template = self.registry.resolve_path(name)
            if template is not None:
                path = self.parse(template, args)

        if not self._run_close_guards(name, args, options):
            self.log("[smartnav.go] Navigation to '%s' cancelled by close guard", name or path)
            return False

        self.current_routes = []
        opts = SmartOptions(options or {}, defaults=NAVIGATE_DEFAULTS)
        trigger = bool(getattr(opts, "trigger", True))
        replace = bool(getattr(opts, "replace", False))

        if path is None:
            if trigger:
                self.process_controllers(name, args)
            return True

        self.history.navigate(path, trigger=trigger, replace=replace)
        return True

    def _run_close_guards(self, name: Optional[str], args: Any, options: Any) -> bool:
        proceed = True
        for current in list(self.current_routes):
            guard = self.registry.close_guard(current)
            if guard is not None and current != name:
                proceed = bool(guard(name, args, options))
        return proceed

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------
    def exists(self, *, name: Optional[str] = None, path: Optional[str] = None) -> bool:
        return self.registry.exists(name=name, path=path)

    def path(self, name: str) -> Optional[str]:
        """Return the path template of route ``name`` or None."""
        return self.registry.resolve_path(name)

    def get_path(self, name: str, args: Any = None) -> Optional[str]:
        """Return the path of route ``name`` with ``args`` injected, or None."""
        template = self.registry.resolve_path(name)
        if template is None:
            return None
        return self.parse(template, args)

    def parse(self, template: str, args: Any) -> str:
        return parse(template, args, strict=self.options.strict)

    def current_path(self) -> str:
        return self.history.current_path()

    def members(self) -> Dict[str, Any]:
        """Describe registered routes: path, owner and handler count."""
        result: Dict[str, Any] = {}
        for name in self.registry.names():
            chain = self.registry.chain(name)
            template = self.registry.resolve_path(name)
            binding = self.registry.binding(template) if template is not None else None
            result[name] = {
                "path": template,
                "owner": binding.owner if binding else name,
                "handlers": len(chain.entries) if chain else 0,
                "authed": [d.authed for d in self.registry.definitions(name)],
                "compiled": bool(chain and chain.matcher is not None),
            }
        return result

    # ------------------------------------------------------------------
    # Pending route persistence
    # ------------------------------------------------------------------
    def store_current_route(self) -> None:
        path = self.current_path()
        self.log("[smartnav] Storing current path: %s", path)
        self.store.set(path)

    def get_stored_route(self) -> Optional[str]:
        return self.store.get()

    def clear_store(self) -> None:
        self.store.clear()

    # ------------------------------------------------------------------
    # Router events
    # ------------------------------------------------------------------
    def on(self, event: str, callback: Callable[..., Any]) -> "BaseRouter":
        self._events.on(event, callback)
        return self

    def off(self, event: Optional[str] = None, callback: Optional[Callable] = None) -> "BaseRouter":
        self._events.off(event, callback)
        return self
