"""Command-line interface for parsex.

Provides query, render, pretty and stats commands over markup files.
"""

from .main import main

__all__ = ["main"]
