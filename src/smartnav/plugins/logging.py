"""Logging plugin (source of truth).

Wraps every route action and reports when it runs:

- ``before`` (default True): ``"{route} start"``, followed by the positional
  route arguments when ``args`` is on (``"user start ['42']"``);
- ``after`` (default True): ``"{route} end (<ms> ms)"``, elapsed time
  formatted ``{elapsed:.2f}``.

Sinks, first match wins:

- ``print`` → ``print(message)``;
- ``log`` → ``logger.info(message)`` when the logger reports handlers,
  otherwise the router's own diagnostic sink (``router.log``), so a
  ``log=`` callable given to the router also receives plugin messages;
- neither → no output.

``enabled`` gates the plugin entirely. All switches are accepted as keyword
arguments or as ``flags`` (``"before:off,args:on"``), router wide or per route:
``router.logging.configure(_target="admin", before=False)``.

Only ``Invoke`` actions are wrapped; aliases and triggers are not logged here.
An exception raised by the action propagates and skips the end message.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from smartnav.core.router import Router
from smartnav.plugins._base_plugin import BasePlugin, RouteEntry

_DEFAULTS = {
    "enabled": True,
    "before": True,
    "after": True,
    "args": False,
    "log": True,
    "print": False,
}


class LoggingPlugin(BasePlugin):
    """Reports route action calls with timing."""

    plugin_code = "logging"
    plugin_description = "Reports route action calls with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("smartnav")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        args: bool = False,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options (storage is handled by the wrapper)."""
        pass

    def _emit(self, router: Any, message: str, cfg: Dict[str, bool]) -> None:
        if cfg["print"]:
            print(message)
        elif cfg["log"]:
            has_handlers = getattr(self._logger, "hasHandlers", None) or getattr(
                self._logger, "has_handlers", None
            )
            if callable(has_handlers) and has_handlers():
                self._logger.info(message)
            else:
                router.log(message)

    def wrap_handler(self, router, entry: RouteEntry, call_next: Callable):
        def logged(*args, **kwargs):
            cfg = self._effective_config(entry.name)
            if not cfg["enabled"]:
                return call_next(*args, **kwargs)
            if cfg["before"]:
                suffix = f" {list(args)!r}" if cfg["args"] and args else ""
                self._emit(router, f"{entry.name} start{suffix}", cfg)
            started = time.perf_counter()
            result = call_next(*args, **kwargs)
            if cfg["after"]:
                elapsed = (time.perf_counter() - started) * 1000
                self._emit(router, f"{entry.name} end ({elapsed:.2f} ms)", cfg)
            return result

        return logged

    def _effective_config(self, route_name: str) -> Dict[str, bool]:
        cfg = self.configuration(route_name)
        return {
            key: default if cfg.get(key) is None else bool(cfg[key])
            for key, default in _DEFAULTS.items()
        }


Router.register_plugin(LoggingPlugin)
