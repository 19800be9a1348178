"""Delimiter-aware scanning helpers.

The extractor never builds an AST. Instead it walks raw source text with the
primitives in this module, which track nesting depth of ``( [ { <`` and treat
quoted string literals as opaque. None of them raise on malformed input: an
unbalanced span simply yields a best-effort result.
"""

import re

OPENERS = "([{<"
CLOSERS = ")]}>"
QUOTES = "'\"`"

_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_NON_NEWLINE_RE = re.compile(r"[^\n]")


def is_arrow_head(text: str, index: int) -> bool:
    """Return True if the ``>`` at ``index`` belongs to an ``=>`` arrow."""
    return text[index] == ">" and index > 0 and text[index - 1] == "="


def skip_string(text: str, index: int) -> int:
    """Return the index just past the string literal starting at ``index``.

    Single and double quoted literals cannot span lines, so an unterminated
    one stops at the next newline. Template literals run to the closing
    backtick or the end of the text.
    """
    quote = text[index]
    i = index + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i
        i += 1
    return len(text)


def split_top_level(span: str, separators: str = ",") -> list[str]:
    """Split ``span`` on separators that sit at nesting depth zero.

    Args:
        span: Text to split, e.g. a raw parameter list.
        separators: Characters that act as separators.

    Returns:
        Stripped, non-empty segments in source order.
    """
    segments: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(span):
        ch = span[i]
        if ch in QUOTES:
            i = skip_string(span, i)
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            if not is_arrow_head(span, i):
                depth -= 1
        elif ch in separators and depth == 0:
            segments.append(span[start:i])
            start = i + 1
        i += 1
    segments.append(span[start:])

    return [segment.strip() for segment in segments if segment.strip()]


def find_top_level(text: str, target: str, start: int = 0) -> int:
    """Find the first ``target`` character at depth zero.

    An ``=`` target skips the comparison and arrow operators
    (``==``, ``!=``, ``<=``, ``>=``, ``=>``).

    Returns:
        Index of the match, or -1.
    """
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch == target and depth == 0:
            if target != "=" or not _is_operator_equals(text, i):
                return i
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS and not is_arrow_head(text, i):
            depth -= 1
        i += 1
    return -1


def _is_operator_equals(text: str, index: int) -> bool:
    following = text[index + 1] if index + 1 < len(text) else ""
    preceding = text[index - 1] if index > 0 else ""
    return following in ("=", ">") or preceding in ("=", "!", "<", ">")


def find_matching(text: str, open_index: int) -> int | None:
    """Find the closer that balances the opener at ``open_index``.

    Only the bracket kind found at ``open_index`` is counted, at any depth.

    Returns:
        Index of the matching closer, or None when the span is unbalanced.
    """
    opener = text[open_index]
    closer = _PAIRS[opener]
    depth = 0
    i = open_index
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch == opener:
            depth += 1
        elif ch == closer and not is_arrow_head(text, i):
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def skip_whitespace(text: str, index: int) -> int:
    """Return the first non-whitespace index at or after ``index``."""
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def line_number_at(text: str, offset: int) -> int:
    """Return the 1-based line number of ``offset`` within ``text``."""
    return text.count("\n", 0, offset) + 1


def mask_strings(text: str) -> str:
    """Blank the contents of string literals.

    Opening quotes and newlines are kept, so offsets in the result match the
    original text. Pattern matches found in the masked text can be read back
    from the original.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            out.append(ch)
            out.append(_NON_NEWLINE_RE.sub(" ", text[i + 1 : end]))
            i = end
            continue
        out.append(ch)
        i += 1

    return "".join(out)


def strip_comments(text: str) -> str:
    """Blank out ``//`` and ``/* */`` comments.

    Comment characters are replaced with spaces and newlines are kept, so
    offsets and line numbers in the result match the original text.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            if end == -1:
                end = n
            out.append(" " * (end - i))
            i = end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append(_NON_NEWLINE_RE.sub(" ", text[i:end]))
            i = end
            continue
        out.append(ch)
        i += 1

    return "".join(out)
