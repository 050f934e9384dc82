"""Glob filters for virtual paths.

Only ``*`` (any run of characters, including ``/``) and ``?`` (exactly one
character) are special; everything else, brackets included, is literal.
Matching is case-insensitive and treats ``\\`` as ``/``.
"""

import re
from typing import Callable, Optional


def compile_glob(pattern: str) -> "re.Pattern":
    parts = []
    for char in pattern.replace("\\", "/"):
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def make_filter(pattern: Optional[str]) -> Callable[[str], bool]:
    """Return a predicate for the pattern; no pattern accepts everything."""
    if not pattern:
        return lambda path: True
    regex = compile_glob(pattern)
    return lambda path: regex.fullmatch(path) is not None
