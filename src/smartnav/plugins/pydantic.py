"""Pydantic validation plugin (source of truth).

URL parameters reach route actions as strings. This plugin validates and
coerces them against the action's type hints, so ``def show(user_id: int)``
receives ``42`` for ``/user/42``.

Behaviour
---------
- ``on_decore(router, func, entry)``: resolves ``get_type_hints(func)``
  (unresolvable hints → no model), drops ``return``, builds a model
  ``<func.__name__>_Model`` with one field per annotated parameter (default
  kept, else required) and stores ``{"model", "hints", "signature"}`` in
  ``entry.metadata["pydantic"]``. A hint naming a parameter missing from the
  signature raises ``ValueError``.
- ``wrap_handler``: passthrough when no model exists. Otherwise binds the
  positional URL parameters to the signature. An optional path group that did
  not match arrives as ``None``; when the parameter has a default, the
  default is used instead. Annotated values are validated and the action is
  called with the coerced values; unannotated arguments pass through
  untouched. Failures raise ``ValidationError`` titled
  ``"Validation error in <route>"``.
- ``configure(disabled=True)`` turns validation off router wide or for one
  route (``_target="name"``), checked at call time.

Registration
------------
Registers itself as ``"pydantic"`` at import.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Optional, Tuple, get_type_hints

from pydantic import ValidationError, create_model

from smartnav.core.router import Router
from smartnav.plugins._base_plugin import BasePlugin, RouteEntry


class PydanticPlugin(BasePlugin):
    """Validate route action arguments with Pydantic using type hints."""

    plugin_code = "pydantic"
    plugin_description = "Validates route action arguments using Pydantic type hints"

    def configure(self, disabled: bool = False):
        """Configure pydantic plugin options (storage is handled by the wrapper)."""
        pass

    def on_decore(self, router: Router, func: Callable, entry: RouteEntry) -> None:
        try:
            hints = get_type_hints(func)
        except Exception:
            return

        hints.pop("return", None)
        if not hints:
            return

        sig = inspect.signature(func)
        fields = {}
        for param_name, hint in hints.items():
            param = sig.parameters.get(param_name)
            if param is None:
                raise ValueError(
                    f"Action '{func.__name__}' has type hint for '{param_name}' "
                    f"which is not in the function signature"
                )
            elif param.default is inspect.Parameter.empty:
                fields[param_name] = (hint, ...)
            else:
                fields[param_name] = (hint, param.default)

        entry.metadata["pydantic"] = {
            "model": create_model(f"{func.__name__}_Model", **fields),  # type: ignore
            "hints": hints,
            "signature": sig,
        }

    def wrap_handler(self, router: Router, entry: RouteEntry, call_next: Callable):
        """Validate annotated parameters with the cached model before calling."""
        meta = entry.metadata.get("pydantic", {})
        model = meta.get("model")
        if not model:
            return call_next

        sig = meta["signature"]
        hints = meta["hints"]

        def wrapper(*args, **kwargs):
            if self.configuration(entry.name).get("disabled"):
                return call_next(*args, **kwargs)

            bound = sig.bind(*args, **kwargs)
            for key, value in list(bound.arguments.items()):
                default = sig.parameters[key].default
                if value is None and default is not inspect.Parameter.empty:
                    del bound.arguments[key]
            bound.apply_defaults()
            to_validate = {k: v for k, v in bound.arguments.items() if k in hints}
            try:
                validated = model(**to_validate)
            except ValidationError as exc:
                raise ValidationError.from_exception_data(
                    title=f"Validation error in {entry.name}",
                    line_errors=exc.errors(),
                ) from exc

            for key, value in validated:
                bound.arguments[key] = value
            return call_next(*bound.args, **bound.kwargs)

        return wrapper

    def get_model(self, entry: RouteEntry) -> Optional[Tuple[str, Any]]:
        """Return the Pydantic model for this route action if not disabled."""
        if self.configuration(entry.name).get("disabled"):
            return None
        model = entry.metadata.get("pydantic", {}).get("model")
        if not model:
            return None
        return ("pydantic_model", model)

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        meta = entry.metadata.get("pydantic", {})
        if not meta:
            return {}
        return {"model": meta.get("model"), "hints": meta.get("hints")}


Router.register_plugin(PydanticPlugin)
