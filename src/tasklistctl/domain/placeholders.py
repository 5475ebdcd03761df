"""``{{token}}`` placeholder substitution for template instantiation.

Tokens with a supplied value are replaced; unmatched tokens stay verbatim
so a partially parameterized template still instantiates cleanly.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.-]+)\s*\}\}")


def substitute(text: str | None, params: Mapping[str, str] | None) -> str | None:
    """Replace ``{{name}}`` tokens in *text* with values from *params*."""
    if text is None or not params:
        return text

    def _replace(match: re.Match[str]) -> str:
        value = params.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_RE.sub(_replace, text)


def find_placeholders(text: str | None) -> list[str]:
    """Token names referenced in *text*, in first-seen order."""
    if not text:
        return []
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)
