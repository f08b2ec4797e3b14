"""Plugin contract definitions used by the Router runtime.

Objects
~~~~~~~
``RouteEntry``
    Dataclass describing one route action at registration time. Fields:

    - ``name`` – route name the action was declared under
    - ``func`` – the action callable (``Invoke.func``)
    - ``router`` – Router instance that owns the route
    - ``definition`` – the normalised ``RouteDefinition``
    - ``plugins`` – names of plugins applied to the action (order matters)
    - ``metadata`` – mutable dict used by plugins to store annotations
    - ``handler`` – the wrapped callable actually invoked by the handler chain
      (rebuilt whenever plugins change)

``BasePlugin``
    Base class every plugin subclasses.

    Required class attributes:

    - ``plugin_code`` – unique identifier used for registration (e.g. "logging")
    - ``plugin_description`` – human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``; ``**config`` goes
    through ``configure()``.

    ``configure(**config)``
        Subclasses declare accepted options through the method signature.
        ``__init_subclass__`` wraps it to:
        - parse ``flags`` (e.g. "enabled,before:off") into booleans
        - honour ``_target``: ``"--base--"`` (router level, default), a route
          name, or comma-separated route names
        - validate the options with ``pydantic.validate_call``
        - write them to the router's plugin store

    ``configuration(route_name=None)``
        Router-level config merged with the per-route override.

    ``on_decore(router, func, entry)``
        Called once per action registration (and for existing entries when
        the plugin is attached late).

    ``wrap_handler(router, entry, call_next)``
        Returns the middleware layer around ``call_next``.

    ``entry_metadata(router, entry)``
        Optional data exposed by ``Router.members()``.

Configuration storage lives on the router (``_plugin_info``), never on the
plugin, so attaching the same plugin class to two routers keeps them apart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import validate_call

__all__ = ["BasePlugin", "RouteEntry"]


@dataclass
class RouteEntry:
    """Metadata for a registered route action."""

    name: str
    func: Callable
    router: Any
    definition: Any
    plugins: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    handler: Optional[Callable] = None


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    def wrapper(
        self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in [t.strip() for t in _target.split(",") if t.strip()]:
                wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Override in subclasses to define accepted configuration parameters."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        plugin_bucket = self._get_store().setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-route override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        if route_name:
            merged.update(plugin_bucket.get(route_name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_decore(
        self, router: Any, func: Callable, entry: RouteEntry
    ) -> None:  # pragma: no cover - default no-op
        """Hook run when the route action is registered."""

    def wrap_handler(self, router: Any, entry: RouteEntry, call_next: Callable) -> Callable:
        """Wrap action invocation; default passthrough."""
        return call_next

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
