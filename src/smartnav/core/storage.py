"""Pending-route persistence.

The auth gate stores the path a logged-out user tried to reach so startup can
resume it after a login reload. The backend is any ``MutableMapping``: the
default is a plain dict (process lifetime); hosts pass ``shelve`` objects or
their own key/value adapters for persistence across restarts.
"""

from __future__ import annotations

from typing import MutableMapping, Optional

__all__ = ["PendingRouteStore", "DEFAULT_STORAGE_KEY"]

DEFAULT_STORAGE_KEY = "smartnav:path"


class PendingRouteStore:
    __slots__ = ("backend", "key")

    def __init__(
        self,
        backend: Optional[MutableMapping[str, str]] = None,
        *,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self.backend: MutableMapping[str, str] = {} if backend is None else backend
        self.key = key

    def set(self, path: str) -> None:
        self.backend[self.key] = path

    def get(self) -> Optional[str]:
        return self.backend.get(self.key)

    def clear(self) -> None:
        self.backend.pop(self.key, None)
