"""Text normalization helpers for album metadata.

Two separate concerns live here:

1. **Display cleanup** -- Last.fm strings arrive with stray whitespace and
   occasional embedded newlines; :func:`clean_display` trims and collapses
   them so stored ``artist`` / ``title`` values are tidy.

2. **Key normalization** -- :func:`normalize_key_part` produces the
   case-insensitive, trimmed form used to build the natural key behind the
   deterministic album id.  It is deliberately minimal: changing it changes
   every stored id.
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def clean_display(value: str | None) -> str:
    """Trim *value* and collapse internal whitespace runs to one space.

    ``None`` becomes ``""`` so callers always get a string back.
    """
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_key_part(value: str) -> str:
    """Lowercase and trim one half of a natural key.

    >>> normalize_key_part("  Miles Davis ")
    'miles davis'
    """
    return value.strip().lower()
