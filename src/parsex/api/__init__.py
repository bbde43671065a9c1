"""Public parsing API.

Key Components:
    parse / parse_file: One-shot parsing functions
    MarkupParser: Reusable parser with configuration and statistics
    Document: Query, edit and render surface over a parsed document
"""

from .document import Document
from .parser import MarkupParser, parse, parse_file

__all__ = [
    "Document",
    "MarkupParser",
    "parse",
    "parse_file",
]
