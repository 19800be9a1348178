"""Type expression canonicalization.

Equality is syntactic only: ``string | number`` and ``number | string``
normalize to different strings and are reported as a change.
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_UNION_RE = re.compile(r"\s*\|\s*")
_INTERSECTION_RE = re.compile(r"\s*&\s*")


def normalize_type(type_expr: str) -> str:
    """Canonicalize a type expression for comparison.

    Collapses whitespace runs, puts exactly one space on each side of ``|``
    and ``&``, and trims the result.

    Args:
        type_expr: Raw type expression.

    Returns:
        Normalized type expression.
    """
    normalized = _WHITESPACE_RE.sub(" ", type_expr)
    normalized = _UNION_RE.sub(" | ", normalized)
    normalized = _INTERSECTION_RE.sub(" & ", normalized)
    return normalized.strip()


def types_equal(left: str, right: str) -> bool:
    """Return True if two type expressions normalize to the same string."""
    return normalize_type(left) == normalize_type(right)
