"""Block splitter: partitions a T-SQL script into procedure candidate blocks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from sprocforensic.utils.sql_patterns import BATCH_TERMINATOR_PATTERN, PROCEDURE_ANCHOR_PATTERN

logger = logging.getLogger(__name__)

_TERMINATOR_RE = re.compile(BATCH_TERMINATOR_PATTERN, re.IGNORECASE)
_ANCHOR_RE = re.compile(PROCEDURE_ANCHOR_PATTERN, re.IGNORECASE)


@dataclass(frozen=True)
class RawBlock:
    """One batch of source text believed to hold a procedure definition.

    Attributes:
        text: Trimmed batch text.
        ordinal: 0-based index of the batch within the script.
        start_line: 1-based line number of the batch's first line.
    """

    text: str
    ordinal: int = 0
    start_line: int = 1


def split_batches(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Group lines into batches separated by ``GO`` terminator lines.

    Lines are expected to keep their line endings (as produced by iterating a
    file opened with ``newline=""``); only one batch is buffered at a time.

    Yields:
        Tuples of (1-based start line, batch text).
    """
    buffer: list[str] = []
    start_line = 1
    line_no = 0
    for line_no, line in enumerate(lines, start=1):
        if _TERMINATOR_RE.match(line.rstrip("\n")):
            yield start_line, "".join(buffer)
            buffer = []
            start_line = line_no + 1
            continue
        buffer.append(line)
    if buffer:
        yield start_line, "".join(buffer)


class BlockSplitter:
    """Split a script into batches and keep the ones that create a procedure.

    Batches that do not match the procedure anchor are dropped silently;
    they are not procedures, so they are not parse failures either.
    """

    def __init__(self) -> None:
        self.batches_seen = 0
        self.blocks_found = 0

    def split(self, text: str) -> list[RawBlock]:
        """Split fully loaded script text into procedure blocks."""
        return list(self.split_lines(text.splitlines(keepends=True)))

    def split_lines(self, lines: Iterable[str]) -> Iterator[RawBlock]:
        """Stream procedure blocks out of an iterable of script lines."""
        for ordinal, (start_line, batch) in enumerate(split_batches(lines)):
            self.batches_seen += 1
            trimmed = batch.strip()
            if not trimmed or not is_procedure_block(trimmed):
                continue
            self.blocks_found += 1
            yield RawBlock(text=trimmed, ordinal=ordinal, start_line=start_line)

        logger.debug(
            "Block splitting complete: %d batches, %d procedure blocks",
            self.batches_seen,
            self.blocks_found,
        )


def is_procedure_block(text: str) -> bool:
    """Check whether trimmed batch text begins a procedure definition."""
    return bool(_ANCHOR_RE.match(text))
