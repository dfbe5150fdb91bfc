"""Command-line interface for Tonal Duet."""

from .main import main

__all__ = ["main"]
