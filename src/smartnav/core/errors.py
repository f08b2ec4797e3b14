"""Error taxonomy for SmartNav.

Only :class:`ConfigurationError` is ever raised by the engine, and only when
the router runs with ``strict=True``. Every other failure is an outcome, not
an exception:

- unknown route name or unmatched path: ``go()`` returns ``False`` and the
  ``404`` route receives the raw current path;
- auth mismatch: the entry stops and ``403`` (or ``login`` with
  ``redirect_to_login``) is dispatched;
- close guard veto: ``go()`` returns ``False`` with nothing mutated.
"""

from __future__ import annotations

__all__ = ["SmartNavError", "ConfigurationError"]


class SmartNavError(Exception):
    """Base class for SmartNav errors."""


class ConfigurationError(SmartNavError, ValueError):
    """Malformed route definition or path parameters (strict mode only)."""
