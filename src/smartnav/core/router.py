"""Router with plugin pipeline (source of truth).

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, middleware wrapping of route actions, and plugin
configuration stored on the router instance.

Internal state
--------------
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance.
- ``_plugin_info``: per-plugin configuration store; a reserved ``"--base--"``
  bucket holds router-level config and one bucket per route name holds
  overrides, each with ``config`` and ``locals``.

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` requires a ``BasePlugin``
subclass with a ``plugin_code``. Re-registering a code with a different class
raises ``ValueError`` unless ``name`` is given explicitly (intentional
replacement). ``available_plugins`` returns a shallow copy of the registry.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the class (``ValueError`` listing the
available names when missing), instantiates it with ``config``, applies
``on_decore`` to every action already registered, rebuilds the wrapped
handlers and returns ``self``. ``__getattr__`` exposes attached plugins by
name or raises ``AttributeError``.

Wrapping pipeline
-----------------
``_wrap_handler(entry, call_next)`` builds layers from ``_plugins`` in reverse
order (first attached = outermost). Each layer is skipped at call time when
the plugin's effective ``enabled`` config for the route is false.

Only ``Invoke`` actions are wrapped: aliases, triggers, the auth gate and
close guards are engine behaviour, not middleware.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from smartnav.core.base_router import BaseRouter
from smartnav.plugins._base_plugin import BasePlugin, RouteEntry

__all__ = ["Router", "default_router"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


class Router(BaseRouter):
    """Navigation engine with plugin registry/pipeline support."""

    __slots__ = (
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "Router":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        instance = plugin_class(self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        for entry in self._entries:
            self._apply_plugin(instance, entry)
        self._rebuild_handlers()
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Return plugin config (global + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' attached to router")
        return plugin.configuration(route_name)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        return bool(self.get_config(plugin_name, route_name).get("enabled", True))

    def __getattr__(self, name: str) -> Any:
        plugins = object.__getattribute__(self, "_plugins_by_name")
        plugin = plugins.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router")
        return plugin

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_handler(self, entry: RouteEntry, call_next: Callable) -> Callable:  # type: ignore[override]
        wrapped = call_next
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_handler(self, entry, wrapped)
            wrapped = self._create_wrapper(plugin, entry, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        entry: RouteEntry,
        plugin_call: Callable,
        next_handler: Callable,
    ) -> Callable:
        @wraps(next_handler)
        def wrapper(*args, **kwargs):
            if not self.is_plugin_enabled(entry.name, plugin.name):
                return next_handler(*args, **kwargs)
            return plugin_call(*args, **kwargs)

        return wrapper

    def _apply_plugin(self, plugin: BasePlugin, entry: RouteEntry) -> None:
        if plugin.name not in entry.plugins:
            entry.plugins.append(plugin.name)
        plugin.on_decore(self, entry.func, entry)

    def _after_entry_registered(self, entry: RouteEntry) -> None:  # type: ignore[override]
        for plugin in self._plugins:
            self._apply_plugin(plugin, entry)

    def members(self) -> Dict[str, Any]:  # type: ignore[override]
        """Describe routes, adding per-plugin config and metadata of their actions."""
        result = super().members()
        for entry in self._entries:
            plugins_info: Dict[str, Dict[str, Any]] = {}
            for plugin in self._plugins:
                plugin_data: Dict[str, Any] = {}
                config = plugin.configuration(entry.name)
                if config:
                    plugin_data["config"] = config
                meta = plugin.entry_metadata(self, entry)
                if meta:
                    plugin_data["metadata"] = meta
                if plugin_data:
                    plugins_info[plugin.name] = plugin_data
            if plugins_info:
                result[entry.name].setdefault("plugins", []).append(plugins_info)
        return result


_DEFAULT_ROUTER: Optional[Router] = None


def default_router() -> Router:
    """Return the process-wide convenience router, creating it on first use."""
    global _DEFAULT_ROUTER
    if _DEFAULT_ROUTER is None:
        _DEFAULT_ROUTER = Router()
    return _DEFAULT_ROUTER
