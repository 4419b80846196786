"""Ports - interfaces for external dependencies."""

from .storage import StoragePort
from .transcriber import TranscriberPort

__all__ = ["StoragePort", "TranscriberPort"]
