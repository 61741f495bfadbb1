"""User segment value object.

A segment is the filesystem-safe form of a user name. Every storage
operation is scoped to one segment; anonymous access uses
``DEFAULT_SEGMENT``.
"""

from __future__ import annotations

import re
from contextvars import ContextVar

DEFAULT_SEGMENT = "default"

# Characters that are invalid in a file name on at least one supported OS,
# plus ASCII control characters.
_INVALID_CHARS = re.compile(r'[\x00-\x1f/\\:*?"<>|]+')

# Segment of the user issuing the current request
current_segment_var: ContextVar[str] = ContextVar(
    "current_segment", default=DEFAULT_SEGMENT
)


def sanitize_path_component(value: str | None, fallback: str) -> str:
    """Replace runs of invalid file name characters with ``_``.

    Pieces are trimmed; when nothing usable remains ``fallback`` is returned.
    """
    pieces = [p.strip() for p in _INVALID_CHARS.split(value or "")]
    joined = "_".join(p for p in pieces if p)
    # "." and ".." would escape the parent directory
    if not joined or set(joined) == {"."}:
        return fallback
    return joined


def sanitize_segment(user_name: str | None) -> str:
    """Map a user name to a directory-safe segment.

    Runs of invalid characters are replaced with ``_``. Blank input, or
    input consisting only of invalid characters, maps to the default
    segment.

    Examples:
        >>> sanitize_segment("alice@example.com")
        'alice@example.com'
        >>> sanitize_segment("DOMAIN\\\\bob")
        'DOMAIN_bob'
        >>> sanitize_segment("  ")
        'default'
    """
    return sanitize_path_component(user_name, DEFAULT_SEGMENT)


def get_current_segment() -> str:
    """Segment of the current request, or the default segment."""
    return current_segment_var.get()


def set_current_segment(user_name: str | None) -> str:
    """Sanitize a user name and make it the current segment.

    Returns:
        The segment that was set.
    """
    segment = sanitize_segment(user_name)
    current_segment_var.set(segment)
    return segment


def resolve_segment(segment: str | None) -> str:
    """Pick an explicit segment over the contextual one."""
    if segment is None:
        return get_current_segment()
    return sanitize_segment(segment)
