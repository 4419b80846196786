"""LectureLens - digitize photographed lecture notes."""

__version__ = "0.1.0"
