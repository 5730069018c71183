"""Abstract base source for T-SQL script input."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """Abstract base class for script sources.

    A source yields the script line by line, keeping line endings, so the
    block splitter can stream batches without holding the whole script.
    Sources are strictly read-only.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._handle: Any = None

    @abstractmethod
    def open(self) -> None:
        """Open the underlying input."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying input."""

    @abstractmethod
    def iter_lines(self) -> Iterator[str]:
        """Yield script lines with their line endings."""

    @property
    def is_open(self) -> bool:
        """Check if the source has an open handle."""
        return self._handle is not None

    def __enter__(self) -> BaseSource:
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
