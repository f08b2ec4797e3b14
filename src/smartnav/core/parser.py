"""Path templates: argument injection and matcher compilation.

Templates use ``:name`` for a single segment parameter, ``*name`` for a splat
that may span segments and ``( ... )`` for an optional part, e.g.
``user/:id/edit`` or ``docs/*page`` or ``search(/:term)``.

``parse`` only understands ``:name`` segments; it fills them positionally and
never looks at parameter names. ``compile_path``/``extract_parameters`` are the
matcher side used by the history binding: a compiled pattern accepts a
fragment (no leading ``/``), optionally followed by a ``?query`` which is
ignored for argument extraction.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Pattern
from urllib.parse import unquote

from .definitions import normalize_args
from .errors import ConfigurationError

__all__ = ["PARAM_MARKER", "parse", "compile_path", "extract_parameters"]

PARAM_MARKER = ":"

_ESCAPE_RE = re.compile(r"[\-{}\[\]+?.,\\\^$|#\s]")
_OPTIONAL_PARAM_RE = re.compile(r"\((.*?)\)")
_NAMED_PARAM_RE = re.compile(r"(\(\?)?:\w+")
_SPLAT_PARAM_RE = re.compile(r"\*\w+")


def parse(template: str, args: Any, *, strict: bool = False) -> str:
    """Inject ``args`` into the ``:param`` segments of ``template``.

    Arguments are consumed left to right in template order. Non-parameter
    segments pass through unchanged. When fewer arguments than parameters are
    given, the remaining parameter segments render empty; with ``strict=True``
    a :class:`ConfigurationError` is raised instead, also when no arguments
    are given at all.
    """
    values = normalize_args(args)
    if not values and not strict:
        return template

    parts = template.split("/")
    index = 0
    rendered: List[str] = []
    for part in parts:
        if not part.startswith(PARAM_MARKER):
            rendered.append(part)
            continue
        if index < len(values):
            rendered.append(str(values[index]))
        elif strict:
            raise ConfigurationError(
                f"Missing argument for parameter {part!r} in path {template!r} "
                f"({len(values)} given)"
            )
        else:
            rendered.append("")
        index += 1
    return "/".join(rendered)


def _named_param(match: "re.Match[str]") -> str:
    if match.group(1):
        return match.group(0)
    return r"([^/?]+)"


def compile_path(template: str) -> Pattern[str]:
    """Compile a path template into an anchored regular expression."""
    pattern = _ESCAPE_RE.sub(lambda m: "\\" + m.group(0), template)
    pattern = _OPTIONAL_PARAM_RE.sub(r"(?:\1)?", pattern)
    pattern = _NAMED_PARAM_RE.sub(_named_param, pattern)
    pattern = _SPLAT_PARAM_RE.sub(r"([^?]*?)", pattern)
    return re.compile("^" + pattern + r"(?:\?([\s\S]*))?$")


def extract_parameters(matcher: Pattern[str], fragment: str) -> Optional[List[Optional[str]]]:
    """Return the decoded positional parameters, or ``None`` on mismatch."""
    match = matcher.match(fragment)
    if match is None:
        return None
    params = match.groups()[:-1]
    return [unquote(param) if param is not None else None for param in params]
