"""Template references embedded in substitute text.

A substitute may mention another template as `^name`, optionally closed with a
second caret (`^name^`) so it can sit directly against surrounding text, e.g.
`^verb^ed`. When a template is renamed, every reference to it is rewritten so
the stored text keeps pointing at the same template.
"""

from __future__ import annotations

import re

DELIMITER = "^"

REFERENCE_RE = re.compile(r"\^(?P<name>[\w-]+)(?P<close>\^?)")


def find_references(text: str) -> list[str]:
    """Return the template names referenced in `text`, in order of appearance."""
    return [m.group("name") for m in REFERENCE_RE.finditer(text)]


def contains_reference(text: str, name: str) -> bool:
    return name in find_references(text)


def rename_references(text: str, old_name: str, new_name: str) -> str:
    """Replace references to `old_name` with references to `new_name`.

    Only exact name matches are rewritten: `^fruit_extra` is left alone when
    renaming `fruit`, as is the bare word `fruit`.
    """

    def _swap(m: re.Match[str]) -> str:
        if m.group("name") != old_name:
            return m.group(0)
        return f"{DELIMITER}{new_name}{m.group('close')}"

    return REFERENCE_RE.sub(_swap, text)


def like_pattern(name: str) -> str:
    """SQL LIKE pattern that pre-selects rows which may reference `name`."""
    return f"%{DELIMITER}{name}%"


__all__ = [
    "DELIMITER",
    "REFERENCE_RE",
    "contains_reference",
    "find_references",
    "like_pattern",
    "rename_references",
]
