"""Tokenization of markup into a node stack.

Key Components:
    MarkupTokenizer: Comment pass + tag pass feeding a NodeStack
    TagSpan / SpanKind: Classified ``<...>`` spans
    TokenizationResult: Stack, diagnostics and metrics of one run
    parse_attributes / scan_attributes: Attribute-string parsing
"""

from .attributes import AttributeScan, parse_attributes, scan_attributes
from .tokenizer import (
    COMMENT_PATTERN,
    TAG_PATTERN,
    MarkupTokenizer,
    SpanKind,
    TagSpan,
    TokenizationResult,
    classify_span,
    find_comments,
    iter_spans,
)

__all__ = [
    "COMMENT_PATTERN",
    "TAG_PATTERN",
    "AttributeScan",
    "MarkupTokenizer",
    "SpanKind",
    "TagSpan",
    "TokenizationResult",
    "classify_span",
    "find_comments",
    "iter_spans",
    "parse_attributes",
    "scan_attributes",
]
