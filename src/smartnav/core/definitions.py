"""Route declaration data model (source of truth).

Everything the registry stores is built from the shapes below. Declarations are
normalised once, at ``route()`` time, so the dispatch pipeline never sniffs
runtime types.

Triggers
--------
``Trigger = NamedTrigger(name) | DetailedTrigger(name, args, cache)``

- ``as_trigger(raw)`` accepts an existing trigger, a non-empty string, or a
  mapping with a non-empty ``name`` plus optional ``args`` and ``cache``.
  Anything else returns ``None`` (callers log it as a bad format).
- ``DetailedTrigger.args`` is always a tuple: ``None`` becomes ``()``, a
  list/tuple is copied, any other value is wrapped as a single argument.

Actions
-------
``Action = Invoke(func) | AliasTo(target)``

- ``as_action(raw)``: callable → ``Invoke``; string → ``AliasTo``; ``None`` →
  ``None`` (placeholder route without action). Other values raise
  ``TypeError`` and are reported by ``build_definition``.

Definitions
-----------
``build_definition(raw)`` returns ``(RouteDefinition, problems)``. ``raw`` may
be a ``RouteDefinition`` (returned as-is), a mapping, or ``None``. Invalid
parts are dropped and described in ``problems``; the definition is always
usable. A leading ``/`` is removed from ``path`` so ``"/"`` and ``""`` bind the
same root route.

Registry records
----------------
- ``PathBinding``: path template → owning route name + ordered route names.
- ``HandlerChain``: route name → compiled matcher (``None`` until compiled,
  forever ``None`` for non-owning names) + ordered entry callables.
- ``CachedTriggerRecord``: one-shot trigger bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Pattern, Tuple, Union

__all__ = [
    "NamedTrigger",
    "DetailedTrigger",
    "Trigger",
    "Invoke",
    "AliasTo",
    "Action",
    "RouteDefinition",
    "PathBinding",
    "HandlerChain",
    "CachedTriggerRecord",
    "DEFINITION_FIELDS",
    "as_trigger",
    "as_triggers",
    "as_action",
    "build_definition",
    "normalize_args",
    "strip_leading_slash",
]

DEFINITION_FIELDS = ("path", "authed", "before", "action", "after", "close")


def normalize_args(args: Any) -> List[Any]:
    """Return ``args`` as a list: ``None`` → ``[]``, scalar → ``[scalar]``."""
    if args is None:
        return []
    if isinstance(args, (list, tuple)):
        return list(args)
    return [args]


def strip_leading_slash(path: Optional[str]) -> Optional[str]:
    if isinstance(path, str) and path.startswith("/"):
        return path[1:]
    return path


@dataclass(frozen=True)
class NamedTrigger:
    """Bare trigger name."""

    name: str


@dataclass(frozen=True)
class DetailedTrigger:
    """Trigger with static arguments and optional one-shot caching."""

    name: str
    args: Tuple[Any, ...] = ()
    cache: bool = False


Trigger = Union[NamedTrigger, DetailedTrigger]


@dataclass(frozen=True)
class Invoke:
    func: Callable[..., Any]


@dataclass(frozen=True)
class AliasTo:
    target: str


Action = Union[Invoke, AliasTo]


def as_trigger(raw: Any) -> Optional[Trigger]:
    if isinstance(raw, (NamedTrigger, DetailedTrigger)):
        return raw
    if isinstance(raw, str):
        return NamedTrigger(raw) if raw else None
    if isinstance(raw, Mapping):
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            return None
        return DetailedTrigger(
            name=name,
            args=tuple(normalize_args(raw.get("args"))),
            cache=bool(raw.get("cache", False)),
        )
    return None


def as_triggers(raw: Any) -> Tuple[Tuple[Trigger, ...], List[Any]]:
    """Normalise a single trigger or a sequence of them.

    Returns the valid triggers in declaration order and the rejected items.
    """
    if raw is None:
        return (), []
    items = raw if isinstance(raw, (list, tuple)) else [raw]
    valid: List[Trigger] = []
    rejected: List[Any] = []
    for item in items:
        trigger = as_trigger(item)
        if trigger is None:
            rejected.append(item)
        else:
            valid.append(trigger)
    return tuple(valid), rejected


def as_action(raw: Any) -> Optional[Action]:
    if raw is None or isinstance(raw, (Invoke, AliasTo)):
        return raw
    if isinstance(raw, str):
        return AliasTo(raw)
    if callable(raw):
        return Invoke(raw)
    raise TypeError(f"Unsupported route action: {raw!r}")


@dataclass(frozen=True)
class RouteDefinition:
    """One ``route(name, {...})`` declaration."""

    path: Optional[str] = None
    authed: Optional[bool] = None
    before: Tuple[Trigger, ...] = ()
    after: Tuple[Trigger, ...] = ()
    action: Optional[Action] = None
    close: Optional[Callable[..., Any]] = None

    @property
    def is_alias(self) -> bool:
        return isinstance(self.action, AliasTo)


def build_definition(raw: Any) -> Tuple[RouteDefinition, List[str]]:
    if isinstance(raw, RouteDefinition):
        return raw, []
    problems: List[str] = []
    if raw is None:
        return RouteDefinition(), ["empty route definition"]
    if not isinstance(raw, Mapping):
        return RouteDefinition(), [f"route definition must be a mapping, got {type(raw).__name__}"]

    unknown = sorted(set(raw) - set(DEFINITION_FIELDS))
    if unknown:
        problems.append(f"unknown definition keys: {', '.join(map(str, unknown))}")

    path = raw.get("path")
    if path is not None and not isinstance(path, str):
        problems.append(f"path must be a string, got {type(path).__name__}")
        path = None
    path = strip_leading_slash(path)

    authed = raw.get("authed")
    if authed is not None:
        authed = bool(authed)

    try:
        action = as_action(raw.get("action"))
    except TypeError as exc:
        problems.append(str(exc))
        action = None

    triggers = {}
    for key in ("before", "after"):
        valid, rejected = as_triggers(raw.get(key))
        if rejected:
            problems.append(f"bad {key} triggers: {rejected!r}")
        triggers[key] = valid

    close = raw.get("close")
    if close is not None and not callable(close):
        problems.append(f"close guard must be callable, got {type(close).__name__}")
        close = None

    definition = RouteDefinition(
        path=path,
        authed=authed,
        before=triggers["before"],
        after=triggers["after"],
        action=action,
        close=close,
    )
    return definition, problems


@dataclass
class PathBinding:
    path: str
    owner: str
    names: List[str] = field(default_factory=list)


@dataclass
class HandlerChain:
    name: str
    matcher: Optional[Pattern[str]] = None
    entries: List[Callable[..., bool]] = field(default_factory=list)


@dataclass
class CachedTriggerRecord:
    name: str
    done: bool = False
