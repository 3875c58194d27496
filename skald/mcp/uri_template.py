"""
Skald URI Templates
-------------------
Level-1 style templates: literal text with ``{name}`` placeholders. Each
placeholder matches one or more characters other than ``/``.
"""

import re
from typing import Dict, Iterable, Optional, Tuple, TypeVar

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_]+)\}")

T = TypeVar("T")


class UriTemplate:
    """A compiled URI template."""

    def __init__(self, template: str):
        if not template:
            raise ValueError("URI template cannot be empty")
        self.template = template
        self.variables: Tuple[str, ...] = tuple(_PLACEHOLDER.findall(template))
        self._pattern = re.compile(self._to_regex(template))

    @staticmethod
    def _to_regex(template: str) -> str:
        parts = []
        cursor = 0
        for match in _PLACEHOLDER.finditer(template):
            parts.append(re.escape(template[cursor:match.start()]))
            parts.append("([^/]+)")
            cursor = match.end()
        parts.append(re.escape(template[cursor:]))
        return "".join(parts)

    def extract(self, uri: str) -> Optional[Dict[str, str]]:
        """Return the placeholder values when ``uri`` matches the whole template."""
        match = self._pattern.fullmatch(uri)
        if match is None:
            return None
        return dict(zip(self.variables, match.groups()))

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"


def match_template(
    uri: str, candidates: Iterable[Tuple[UriTemplate, T]]
) -> Optional[Tuple[T, Dict[str, str]]]:
    """
    Return the first ``(value, variables)`` whose template matches ``uri``.

    Candidates are tried in the order given; the first registered template
    wins even if a later one is more specific.
    """
    for template, value in candidates:
        variables = template.extract(uri)
        if variables is not None:
            return value, variables
    return None
