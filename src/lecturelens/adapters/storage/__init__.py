"""Storage adapters."""

from .filesystem import FilesystemExporter

__all__ = ["FilesystemExporter"]
