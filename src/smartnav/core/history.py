"""History facility contract and the in-process implementation.

The engine never touches URLs itself. It talks to a *history facility* that
reports the current path, navigates (optionally pushing an entry) and calls
back the bound route handlers when the path changes.

``MemoryHistory`` keeps an entry stack like a browser session history:

- ``navigate`` to the current fragment is a no-op returning ``False``.
- ``replace=True`` overwrites the current entry, otherwise forward entries
  are discarded and a new one is pushed.
- ``load_url`` runs the first bound handler whose matcher accepts the
  fragment (binding order) and reports whether one matched.
- fragments are stored without leading ``/``/``#`` and without ``root``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Pattern, Protocol, Tuple

__all__ = ["HistoryFacility", "MemoryHistory"]

logger = logging.getLogger("smartnav.history")


class HistoryFacility(Protocol):
    started: bool

    def start(self, *, root: str = "", push_state: bool = True) -> bool: ...

    def current_path(self) -> str: ...

    def navigate(self, path: str, *, trigger: bool = True, replace: bool = False) -> bool: ...

    def route(self, matcher: Pattern[str], callback: Callable[[str], Any]) -> None: ...


class MemoryHistory:
    """History facility backed by an in-memory entry stack."""

    def __init__(self, initial_path: str = "", *, root: str = "") -> None:
        self.root = root.strip("/")
        self.push_state = True
        self.started = False
        self._handlers: List[Tuple[Pattern[str], Callable[[str], Any]]] = []
        self._entries: List[str] = [self._fragment(initial_path)]
        self._index = 0

    def _fragment(self, path: Optional[str]) -> str:
        fragment = (path or "").strip()
        fragment = fragment.lstrip("#/")
        if self.root and (fragment == self.root or fragment.startswith(self.root + "/")):
            fragment = fragment[len(self.root) :].lstrip("/")
        return fragment

    def route(self, matcher: Pattern[str], callback: Callable[[str], Any]) -> None:
        self._handlers.append((matcher, callback))

    def start(self, *, root: Optional[str] = None, push_state: Optional[bool] = None) -> bool:
        """Start listening and dispatch the initial path.

        Returns whether a bound handler matched the initial path.
        """
        if self.started:
            raise RuntimeError("history has already been started")
        if root is not None:
            self.root = root.strip("/")
            self._entries[self._index] = self._fragment(self._entries[self._index])
        if push_state is not None:
            self.push_state = bool(push_state)
        self.started = True
        return self.load_url()

    def stop(self) -> None:
        self.started = False

    def current_path(self) -> str:
        return self._entries[self._index]

    def url(self) -> str:
        separator = "/" if self.push_state else "#"
        base = "/" + self.root if self.root else ""
        return f"{base}{separator}{self.current_path()}"

    def navigate(self, path: str, *, trigger: bool = True, replace: bool = False) -> bool:
        if not self.started:
            return False
        fragment = self._fragment(path)
        if fragment == self.current_path():
            return False
        if replace:
            self._entries[self._index] = fragment
        else:
            del self._entries[self._index + 1 :]
            self._entries.append(fragment)
            self._index += 1
        logger.debug("navigate to %r (replace=%s, trigger=%s)", fragment, replace, trigger)
        if trigger:
            return self.load_url(fragment)
        return True

    def load_url(self, fragment: Optional[str] = None) -> bool:
        fragment = self.current_path() if fragment is None else self._fragment(fragment)
        for matcher, callback in self._handlers:
            if matcher.match(fragment):
                callback(fragment)
                return True
        return False

    def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        return self.load_url()

    def forward(self) -> bool:
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        return self.load_url()

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self._entries)
