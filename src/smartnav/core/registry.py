"""Route registry: path ↔ name ↔ handler-chain bookkeeping (source of truth).

Registration
------------
``register(name, definition, entry)`` binds one handler-chain entry.

- Pathless definitions never create a ``PathBinding``; the entry lands on the
  chain for ``name`` only (created on demand). Such routes are addressable by
  name (``404``, ``403``, ``login`` are usually declared this way).
- New path: a ``PathBinding`` owned by ``name`` is created, ``name`` becomes
  its first member, and the entry is appended to ``name``'s chain.
- Known path: the binding is never rebound. ``name`` is appended to the
  binding's members and the entry is appended to the *owner's* chain, so a
  path match runs every entry in registration order. When ``name`` differs
  from the owner the same entry is also appended to ``name``'s own chain,
  which is created without matcher so it can only be invoked by name.
- A close guard, when present, is stored under ``name`` (last one wins).

Compilation
-----------
``compile()`` derives a matcher from each binding's path template and stores it
on the owner's chain. ``compile_binding(path)`` does the same for one binding
(used for routes declared after startup). Non-owning chains keep ``None``.

Lookup
------
- ``resolve_path(name)``: path template whose binding lists ``name``, or
  ``None``.
- ``resolve_name(fragment)``: first chain, in registration order, whose matcher
  accepts the fragment, or ``None``. Overlapping parameterised templates make
  the choice depend on declaration order.
- ``exists(name=..., path=...)``: name lookup checks chains; path lookup asks
  compiled matchers (``False`` before compilation).
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .definitions import HandlerChain, PathBinding, RouteDefinition, strip_leading_slash
from .parser import compile_path

__all__ = ["RouteRegistry"]


class RouteRegistry:
    __slots__ = ("_bindings", "_chains", "_close_guards", "_definitions")

    def __init__(self) -> None:
        self._bindings: Dict[str, PathBinding] = {}
        self._chains: Dict[str, HandlerChain] = {}
        self._close_guards: Dict[str, Callable] = {}
        self._definitions: Dict[str, List[RouteDefinition]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(
        self, name: str, definition: RouteDefinition, entry: Callable[..., bool]
    ) -> HandlerChain:
        """Bind ``entry`` for ``name``; return the chain a path match runs."""
        self._definitions.setdefault(name, []).append(definition)
        if definition.close is not None:
            self._close_guards[name] = definition.close

        path = definition.path
        if path is None:
            chain = self._ensure_chain(name)
            chain.entries.append(entry)
            return chain

        binding = self._bindings.get(path)
        if binding is None:
            binding = PathBinding(path=path, owner=name)
            self._bindings[path] = binding
        binding.names.append(name)

        owner_chain = self._ensure_chain(binding.owner)
        owner_chain.entries.append(entry)
        if name != binding.owner:
            self._ensure_chain(name).entries.append(entry)
        return owner_chain

    def _ensure_chain(self, name: str) -> HandlerChain:
        chain = self._chains.get(name)
        if chain is None:
            chain = HandlerChain(name=name)
            self._chains[name] = chain
        return chain

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------
    def compile(self) -> List[HandlerChain]:
        """Compile every binding; return each owning chain once, in registration order."""
        chains: Dict[str, HandlerChain] = {}
        for path in self._bindings:
            chain = self.compile_binding(path)
            chains.setdefault(chain.name, chain)
        return list(chains.values())

    def compile_binding(self, path: str) -> HandlerChain:
        binding = self._bindings[path]
        chain = self._chains[binding.owner]
        if chain.matcher is None:
            chain.matcher = compile_path(binding.path)
        return chain

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def chain(self, name: str) -> Optional[HandlerChain]:
        return self._chains.get(name)

    def binding(self, path: str) -> Optional[PathBinding]:
        return self._bindings.get(strip_leading_slash(path))

    def close_guard(self, name: str) -> Optional[Callable]:
        return self._close_guards.get(name)

    def definitions(self, name: str) -> Tuple[RouteDefinition, ...]:
        return tuple(self._definitions.get(name, ()))

    def owned_path(self, name: str) -> Optional[str]:
        """Return the path whose binding is owned by ``name``, if any."""
        for binding in self._bindings.values():
            if binding.owner == name:
                return binding.path
        return None

    def resolve_path(self, name: str) -> Optional[str]:
        for binding in self._bindings.values():
            if name in binding.names:
                return binding.path
        return None

    def resolve_name(self, path: str) -> Optional[str]:
        fragment = strip_leading_slash(path) or ""
        for chain in self._chains.values():
            if chain.matcher is not None and chain.matcher.match(fragment):
                return chain.name
        return None

    def exists(self, *, name: Optional[str] = None, path: Optional[str] = None) -> bool:
        if name:
            return name in self._chains
        if path is not None:
            return self.resolve_name(path) is not None
        return False

    def names(self) -> Tuple[str, ...]:
        return tuple(self._chains)

    def __contains__(self, name: object) -> bool:
        return name in self._chains

    def __iter__(self) -> Iterator[PathBinding]:
        return iter(list(self._bindings.values()))

    def __len__(self) -> int:
        return len(self._chains)
