"""Platform-specific adapters."""

from .clipboard import clipboard_command, copy_to_clipboard

__all__ = ["clipboard_command", "copy_to_clipboard"]
