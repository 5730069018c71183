"""Stored procedure signature parser — extracts schema, name, parameters and body."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, NamedTuple

from sprocforensic.utils.sql_patterns import (
    AS_AFTER_PAREN_PATTERN,
    AS_ANYWHERE_PATTERN,
    AS_END_OF_LINE_PATTERN,
    AS_LINE_START_PATTERN,
    AS_OWN_LINE_PATTERN,
    PARAMETER_PATTERN,
    PROCEDURE_NAME_PATTERN,
    PROCEDURE_OPTIONS_PATTERN,
)
from sprocforensic.utils.sql_text import (
    collapse_whitespace,
    matching_paren,
    split_top_level,
    strip_comments,
    unwrap_parentheses,
)

_NAME_RE = re.compile(PROCEDURE_NAME_PATTERN, re.IGNORECASE)
_PARAMETER_RE = re.compile(PARAMETER_PATTERN, re.IGNORECASE | re.DOTALL)
_OPTIONS_RE = re.compile(PROCEDURE_OPTIONS_PATTERN, re.IGNORECASE)
_SPACE_BEFORE_PAREN_RE = re.compile(r"\s+\(")


@dataclass
class Parameter:
    """A single procedure parameter, in declaration order."""

    name: str
    data_type: str
    direction: str = "IN"
    default_value: str | None = None
    is_readonly: bool = False


@dataclass
class ParsedProcedure:
    """Signature and raw body of one procedure definition."""

    schema: str
    name: str
    parameters: list[Parameter] = field(default_factory=list)
    body: str = ""
    boundary: str | None = None
    start_line: int = 1

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def key(self) -> tuple[str, str]:
        return (self.schema, self.name)


class Boundary(NamedTuple):
    """Location of the parameter-list / body split."""

    strategy: str
    start: int
    end: int


def _search(pattern: str, flags: int = 0) -> Callable[[str], Boundary | None]:
    compiled = re.compile(pattern, re.IGNORECASE | flags)

    def find(text: str) -> Boundary | None:
        match = compiled.search(text)
        if not match:
            return None
        return Boundary("", match.start(), match.end())

    return find


_OWN_LINE_RE = re.compile(AS_OWN_LINE_PATTERN, re.IGNORECASE)
_END_OF_LINE_RE = re.compile(AS_END_OF_LINE_PATTERN, re.IGNORECASE)
_AFTER_PAREN_RE = re.compile(AS_AFTER_PAREN_PATTERN, re.IGNORECASE)


def _find_own_line(text: str) -> Boundary | None:
    """``AS`` alone on a line, unless a header ``AS`` already ended an earlier line.

    ``CREATE PROCEDURE dbo.X AS`` followed by a CTE whose ``AS`` stands alone
    must split at the header, not at the CTE.
    """
    match = _OWN_LINE_RE.search(text)
    if not match:
        return None
    earlier = _END_OF_LINE_RE.search(text, 0, match.end())
    if earlier and earlier.start() < match.start():
        return None
    return Boundary("", match.start(), match.end())


def _find_after_parameter_list(text: str) -> Boundary | None:
    """``AS`` right after the ``)`` closing a parenthesised parameter list.

    The list must open immediately after the procedure name; a ``) AS`` deeper
    in the body (``CAST(x AS int) AS y``) never counts.
    """
    stripped = text.lstrip()
    if not stripped.startswith("("):
        return None
    open_index = len(text) - len(stripped)
    close = matching_paren(text, open_index)
    if close is None:
        return None
    match = _AFTER_PAREN_RE.match(text, close)
    if not match:
        return None
    # Keep the closing parenthesis in the parameter block
    return Boundary("", close + 1, match.end())


# Ordered from strictest to loosest; the first strategy that finds AS wins.
BOUNDARY_STRATEGIES: tuple[tuple[str, Callable[[str], Boundary | None]], ...] = (
    ("own-line", _find_own_line),
    ("paren-then-as", _find_after_parameter_list),
    ("end-of-line", _search(AS_END_OF_LINE_PATTERN)),
    ("line-start", _search(AS_LINE_START_PATTERN, re.MULTILINE)),
    ("anywhere", _search(AS_ANYWHERE_PATTERN)),
)


class SignatureParser:
    """Parser for the header of a ``CREATE PROCEDURE`` block.

    Recovers schema, name and parameter list, and separates them from the
    executable body using a chain of progressively looser boundary
    strategies. Never raises on malformed input: an unrecognizable name
    yields ``None`` and a missing ``AS`` yields an empty parameter list.
    """

    def parse(self, text: str, start_line: int = 1) -> ParsedProcedure | None:
        """Parse one procedure block.

        Args:
            text: Block text starting (after optional comments/SET lines)
                with ``CREATE PROC[EDURE]``.
            start_line: Line number of the block in the source script.

        Returns:
            ParsedProcedure, or None when schema and name cannot be extracted.
        """
        name_match = _NAME_RE.search(text)
        if not name_match:
            return None

        rest = text[name_match.end() :]
        boundary = self.find_boundary(rest)

        if boundary is None:
            param_block = ""
            body = rest
        else:
            param_block = rest[: boundary.start]
            body = rest[boundary.end :]

        return ParsedProcedure(
            schema=name_match.group(1),
            name=name_match.group(2),
            parameters=self.parse_parameters(param_block),
            body=body,
            boundary=boundary.strategy if boundary else None,
            start_line=start_line,
        )

    @staticmethod
    def find_boundary(rest: str) -> Boundary | None:
        """Locate the ``AS`` separating parameters from body."""
        for strategy, find in BOUNDARY_STRATEGIES:
            found = find(rest)
            if found is not None:
                return found._replace(strategy=strategy)
        return None

    def parse_parameters(self, param_block: str) -> list[Parameter]:
        """Parse a parameter-list substring into ordered Parameters."""
        block = strip_comments(param_block).strip()
        if not block:
            return []

        block = _OPTIONS_RE.sub("", block)
        block = unwrap_parentheses(block)

        params: list[Parameter] = []
        for piece in split_top_level(block):
            param = self._parse_parameter(piece)
            if param is not None:
                params.append(param)
        return params

    @staticmethod
    def _parse_parameter(piece: str) -> Parameter | None:
        match = _PARAMETER_RE.match(piece.strip())
        if not match:
            return None

        data_type = _SPACE_BEFORE_PAREN_RE.sub("(", collapse_whitespace(match.group("type")))

        default = match.group("default")
        if default is not None:
            default = default.strip()
            if default.endswith(","):
                default = default[:-1].strip()
            if not default:
                default = None

        return Parameter(
            name=match.group("name"),
            data_type=data_type,
            direction="OUTPUT" if match.group("direction") else "IN",
            default_value=default,
            is_readonly=bool(match.group("readonly")),
        )
