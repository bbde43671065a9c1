"""Parsex: in-memory markup tokenizer, query engine and renderer.

Markup is tokenized into a flat node store backed by a placeholder buffer.
Nodes can be found with chained queries, edited in place, and rendered back
to text; untouched markup round-trips byte for byte.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_file()
- Level 2: Configured parser - MarkupParser with ParserConfig presets
- Level 3: Direct access - NodeStack, TraversalCursor, render functions
"""

__version__ = "0.1.0"
__author__ = "Parsex Team"

# Level 1: Simple functions
# Level 2: Configured parser
from .api import Document, MarkupParser, parse, parse_file
from .render import rebuild, render_document, render_subtree

# Configuration and error types
from .shared import (
    ConfigValidationError,
    DuplicateAttributeError,
    IntegrityError,
    ParserConfig,
    ParsexError,
    RenderConfig,
    TokenizerConfig,
    UnbalancedMarkupError,
)
from .tokenization import parse_attributes

# Level 3: Node store
from .tree import Node, NodeStack, Query, TraversalCursor

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_file",
    "parse_attributes",

    # Level 2: Configured parser and documents
    "MarkupParser",
    "Document",
    "ParserConfig",
    "TokenizerConfig",
    "RenderConfig",

    # Level 3: Node store, traversal and rendering
    "Node",
    "NodeStack",
    "Query",
    "TraversalCursor",
    "rebuild",
    "render_document",
    "render_subtree",

    # Errors
    "ParsexError",
    "IntegrityError",
    "UnbalancedMarkupError",
    "DuplicateAttributeError",
    "ConfigValidationError",
]
