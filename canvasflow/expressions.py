"""Placeholder substitution for action strings.

Two grammars are recognised:

- ``${name}`` is replaced by the project variable ``name``
- ``#{id}`` is replaced by the current runtime value of node ``id``

Placeholders whose name is unknown are left in the text untouched. Both
grammars are resolved in a single left-to-right scan, so text produced by
a substitution is never substituted again.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_RE = re.compile(r"([$#])\{([^}]+)\}")

_MISSING = object()


def to_display_string(value: Any) -> str:
    """Render a runtime value the way it shows up on the canvas."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def interpolate(
    template: str,
    variables: Mapping[str, Any] | None = None,
    node_values: Mapping[str, Any] | None = None,
) -> str:
    if not template:
        return ""
    variables = variables or {}
    node_values = node_values or {}

    def _replace(match: re.Match[str]) -> str:
        sigil, name = match.group(1), match.group(2).strip()
        source = variables if sigil == "$" else node_values
        value = source.get(name, _MISSING)
        if value is _MISSING:
            return match.group(0)
        return to_display_string(value)

    return PLACEHOLDER_RE.sub(_replace, template)


def placeholders(template: str) -> list[tuple[str, str]]:
    """List ``(kind, name)`` pairs referenced by ``template``.

    ``kind`` is ``"variable"`` or ``"node"``.
    """
    return [
        ("variable" if sigil == "$" else "node", name.strip())
        for sigil, name in PLACEHOLDER_RE.findall(template or "")
    ]
