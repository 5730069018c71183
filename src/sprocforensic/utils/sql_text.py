"""Low-level T-SQL text helpers shared by the parsers and analyzers."""

from __future__ import annotations

import re

from sprocforensic.utils.sql_patterns import BLOCK_COMMENT_PATTERN, LINE_COMMENT_PATTERN

_BLOCK_COMMENT_RE = re.compile(BLOCK_COMMENT_PATTERN)
_LINE_COMMENT_RE = re.compile(LINE_COMMENT_PATTERN)
_WHITESPACE_RE = re.compile(r"\s+")
_NAME_PART_RE = re.compile(r"\[[^\]\r\n]+\]|[^.\s]+")


def strip_comments(text: str) -> str:
    """Remove block comments (non-greedy) and then line comments.

    Block comments are replaced by a single space so that tokens on either
    side of them stay separated.
    """
    text = _BLOCK_COMMENT_RE.sub(" ", text)
    return _LINE_COMMENT_RE.sub("", text)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to one space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split text on separators that are outside parentheses and string literals.

    Handles doubled single quotes inside literals (``'it''s'``) and bracketed
    identifiers, so ``decimal(18,2)`` and ``= 'a,b'`` stay in one piece.

    Returns:
        List of pieces, stripped, empty pieces dropped.
    """
    pieces: list[str] = []
    depth = 0
    start = 0
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "'":
            i += 1
            while i < length:
                if text[i] == "'":
                    if i + 1 < length and text[i + 1] == "'":
                        i += 2
                        continue
                    break
                i += 1
        elif ch == "[":
            close = text.find("]", i + 1)
            if close != -1:
                i = close
        elif ch == "(":
            depth += 1
        elif ch == ")":
            if depth > 0:
                depth -= 1
        elif ch == separator and depth == 0:
            pieces.append(text[start:i])
            start = i + 1
        i += 1
    pieces.append(text[start:])
    return [p.strip() for p in pieces if p.strip()]


def unwrap_parentheses(text: str) -> str:
    """Remove one pair of parentheses enclosing the whole text, if present."""
    stripped = text.strip()
    if not (stripped.startswith("(") and stripped.endswith(")")):
        return stripped

    depth = 0
    for i, ch in enumerate(stripped):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            # Closing paren for the opening one found before the end: not enclosing
            if depth == 0 and i != len(stripped) - 1:
                return stripped
    return stripped[1:-1].strip()


def matching_paren(text: str, open_index: int) -> int | None:
    """Index of the ``)`` closing the ``(`` at ``open_index``.

    String literals and bracketed identifiers are skipped. Returns None when
    the parenthesis is never closed.
    """
    depth = 0
    i = open_index
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "'":
            close = text.find("'", i + 1)
            # Doubled quotes just re-enter the literal on the next pass
            if close == -1:
                return None
            i = close
        elif ch == "[":
            close = text.find("]", i + 1)
            if close != -1:
                i = close
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def split_object_name(ref: str) -> list[str]:
    """Split a dotted, optionally bracketed, object name into bare parts.

    >>> split_object_name("[dbo] . [Users]")
    ['dbo', 'Users']
    """
    return [part.strip("[]") for part in _NAME_PART_RE.findall(ref)]


def count_lines(text: str) -> int:
    """Count lines of text, ignoring leading and trailing blank lines."""
    stripped = text.strip()
    if not stripped:
        return 0
    return len(stripped.splitlines())


def preview_lines(text: str, max_lines: int) -> str:
    """Return the first ``max_lines`` lines of the stripped text."""
    lines = text.strip().splitlines()
    return "\n".join(lines[:max_lines])
