"""Script sources and collaborator loaders for sprocforensic."""

from sprocforensic.sources.base import BaseSource
from sprocforensic.sources.dump_file import DumpFileSource, TextSource

__all__ = ["BaseSource", "DumpFileSource", "TextSource"]
