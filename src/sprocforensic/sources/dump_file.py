"""Script sources: a DDL dump file on disk, or text already in memory."""

from __future__ import annotations

import io
import logging
import os
from typing import Iterator

from sprocforensic.sources.base import BaseSource

logger = logging.getLogger(__name__)


class DumpFileSource(BaseSource):
    """Stream a (possibly multi-hundred-MB) DDL dump file line by line.

    The file is decoded incrementally with the configured encoding; it is
    never read into a single string.
    """

    def __init__(self, path: str, encoding: str = "utf-16") -> None:
        super().__init__(name=os.path.basename(path))
        self.path = path
        self.encoding = encoding

    def open(self) -> None:
        """Open the dump for reading.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: If the file cannot be opened.
        """
        if self._handle is not None:
            return
        size = os.path.getsize(self.path)
        logger.info("Opening %s (%.1f MB, %s)", self.path, size / 1024 / 1024, self.encoding)
        # newline="" keeps \r\n intact; the splitter tolerates the trailing \r
        self._handle = open(self.path, encoding=self.encoding, newline="")

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def iter_lines(self) -> Iterator[str]:
        if self._handle is None:
            raise RuntimeError("Source is not open")
        yield from self._handle


class TextSource(BaseSource):
    """Serve script text that is already decoded in memory."""

    def __init__(self, text: str, name: str = "<text>") -> None:
        super().__init__(name=name)
        self.text = text

    def open(self) -> None:
        if self._handle is None:
            self._handle = io.StringIO(self.text, newline="")

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def iter_lines(self) -> Iterator[str]:
        if self._handle is None:
            raise RuntimeError("Source is not open")
        yield from self._handle
