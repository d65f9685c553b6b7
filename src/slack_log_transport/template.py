"""
Message template rendering with "{{ name }}" placeholders.

Placeholders hold a dotted path resolved against the record context
(message, meta, level), e.g. "{{ level }}: {{ meta.user }}".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
import re

PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}")
_MISSING = object()


def _lookup(context: Mapping[str, Any], path: str) -> Any:
    current: Any = context
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING or current is None:
            return None
    return current


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """
    Replace every placeholder with its resolved value.

    Missing or None values render as an empty string.
    """

    def _substitute(match: re.Match[str]) -> str:
        value = _lookup(context, match.group(1).strip())
        return "" if value is None else str(value)

    return PLACEHOLDER.sub(_substitute, template)
