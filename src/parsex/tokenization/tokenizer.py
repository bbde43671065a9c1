"""Markup tokenizer that builds a node stack from raw text.

Tag discovery runs in two passes over the source. The comment pass locates
every ``<!-- ... -->`` span first; the tag pass then scans the text between
comments for ``<...>`` spans. Both kinds of span are fed to the NodeStack in
document order, so node ids follow the order in which tags appear.
"""

import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple

from parsex.shared import (
    DiagnosticLog,
    DiagnosticSeverity,
    DuplicateAttributeError,
    ParseMetrics,
    TokenizerConfig,
    UnbalancedMarkupError,
    get_logger,
)
from parsex.tree import NodeStack

from .attributes import scan_attributes

COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)

# Quoted values may contain '>'; an unbalanced quote falls back to a plain char
TAG_PATTERN = re.compile(r"""<(/?)((?:"[^"<]*"|'[^'<]*'|[^<>])*?)(/?)>""")

TAG_NAME_PATTERN = re.compile(r"[A-Za-z][^\s/>]*")

DECLARATION_PREFIXES = ("!", "?")


class SpanKind(Enum):
    """Classification of a discovered ``<...>`` span."""

    OPENING = auto()
    CLOSING = auto()
    SELF_CLOSING = auto()
    COMMENT = auto()
    DECLARATION = auto()    # <!DOCTYPE>, <?xml?>, unterminated <!-- ... >
    INVALID = auto()        # interior does not start with a tag name


@dataclass
class TagSpan:
    """A ``<...>`` or comment span located in the source text."""

    kind: SpanKind
    start: int
    end: int
    text: str
    tag: str = ""
    attr_string: str = ""

    @property
    def position(self) -> dict:
        """Position information for diagnostics."""
        return {"offset": self.start, "length": self.end - self.start}


@dataclass
class TokenizationResult:
    """Result of tokenizing one document."""

    stack: NodeStack
    diagnostics: DiagnosticLog
    metrics: ParseMetrics = field(default_factory=ParseMetrics)

    @property
    def node_count(self) -> int:
        """Get the total number of nodes created."""
        return len(self.stack)


def classify_span(start: int, end: int, match: "re.Match[str]") -> TagSpan:
    """Classify a TAG_PATTERN match and split its interior.

    The interior is split on its first whitespace into the tag name and the
    attribute string.
    """
    text = match.group(0)
    closing = match.group(1) == "/"
    interior = match.group(2)
    self_closing = match.group(3) == "/"

    if interior.startswith(DECLARATION_PREFIXES) and not closing:
        return TagSpan(SpanKind.DECLARATION, start, end, text)

    name_match = TAG_NAME_PATTERN.match(interior)
    if name_match is None:
        return TagSpan(SpanKind.INVALID, start, end, text)

    tag = name_match.group(0)
    attr_string = interior[name_match.end():].strip()
    if closing:
        kind = SpanKind.CLOSING
    elif self_closing:
        kind = SpanKind.SELF_CLOSING
    else:
        kind = SpanKind.OPENING
    return TagSpan(kind, start, end, text, tag, attr_string)


def find_comments(text: str) -> List[Tuple[int, int]]:
    """Comment pass: locate every comment span."""
    return [match.span() for match in COMMENT_PATTERN.finditer(text)]


def iter_spans(text: str) -> Iterator[TagSpan]:
    """Yield comment and tag spans in document order.

    Tags are only searched for between comments, so markup inside a comment
    never produces a node.
    """
    comments = find_comments(text)
    segment_start = 0
    for comment_start, comment_end in comments + [(len(text), len(text))]:
        for match in TAG_PATTERN.finditer(text, segment_start, comment_start):
            yield classify_span(match.start(), match.end(), match)
        if comment_start < comment_end:
            yield TagSpan(
                SpanKind.COMMENT,
                comment_start,
                comment_end,
                text[comment_start:comment_end],
            )
        segment_start = comment_end


class MarkupTokenizer:
    """Builds a NodeStack from markup text.

    Unmatched closing tags and repeated attribute keys are tolerated and
    reported as diagnostics unless the configuration is strict, in which case
    they raise UnbalancedMarkupError / DuplicateAttributeError.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenizer configuration (lenient by default)
            correlation_id: Optional correlation ID for tracking documents
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tokenizer")

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize markup into a node stack.

        Args:
            text: Raw markup

        Returns:
            TokenizationResult with the stack, diagnostics and metrics

        Raises:
            UnbalancedMarkupError: Strict mode, closing tag without open node
            DuplicateAttributeError: Strict mode, repeated attribute key
        """
        start_time = time.time()
        stack = NodeStack(self.correlation_id)
        diagnostics = DiagnosticLog(self.correlation_id)
        metrics = ParseMetrics(characters_processed=len(text))
        limit_reported = False

        position = 0
        for span in iter_spans(text):
            stack.append_text(text[position:span.start])
            position = span.end

            if span.kind in (SpanKind.DECLARATION, SpanKind.INVALID):
                if span.kind == SpanKind.DECLARATION:
                    metrics.skipped_declarations += 1
                    self._diagnose(
                        diagnostics, DiagnosticSeverity.INFO,
                        "Declaration skipped", span,
                    )
                stack.append_text(span.text)
                continue

            if span.kind == SpanKind.CLOSING:
                if stack.close_tag(span.tag, span.text) is None:
                    self._unmatched_close(span, stack, diagnostics, metrics)
                continue

            if self._limit_reached(stack):
                if not limit_reported:
                    limit_reported = True
                    self._diagnose(
                        diagnostics, DiagnosticSeverity.ERROR,
                        "Node limit reached; remaining tags left as text", span,
                        {"max_nodes": self.config.max_nodes},
                    )
                stack.append_text(span.text)
                continue

            if span.kind == SpanKind.COMMENT:
                stack.push_comment(span.text)
                metrics.comments_found += 1
                continue

            scan = scan_attributes(span.attr_string)
            if scan.has_duplicates:
                if self.config.strict:
                    raise DuplicateAttributeError(span.tag, scan.duplicates)
                self._diagnose(
                    diagnostics, DiagnosticSeverity.WARNING,
                    f"Duplicate attribute(s) on <{span.tag}>; last value kept",
                    span, {"keys": scan.duplicates},
                )
            stack.push(
                span.tag,
                scan.attributes,
                scan.extra,
                span.kind == SpanKind.SELF_CLOSING,
                span.text,
            )

        stack.append_text(text[position:])

        unclosed = stack.unclosed_nodes()
        metrics.unclosed_nodes = len(unclosed)
        if unclosed and self.config.record_diagnostics:
            diagnostics.add(
                DiagnosticSeverity.INFO,
                f"{len(unclosed)} node(s) left unclosed at end of input",
                "tokenizer",
                details={"node_ids": [node.id for node in unclosed]},
            )

        metrics.nodes_created = len(stack)
        metrics.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.debug(
            "Tokenization completed",
            extra={
                "nodes": metrics.nodes_created,
                "comments": metrics.comments_found,
                "unmatched_closes": metrics.unmatched_closes,
                "unclosed": metrics.unclosed_nodes,
                "processing_time_ms": metrics.processing_time_ms,
            }
        )
        return TokenizationResult(stack, diagnostics, metrics)

    def _limit_reached(self, stack: NodeStack) -> bool:
        return (
            self.config.max_nodes is not None
            and len(stack) >= self.config.max_nodes
        )

    def _unmatched_close(
        self,
        span: TagSpan,
        stack: NodeStack,
        diagnostics: DiagnosticLog,
        metrics: ParseMetrics
    ) -> None:
        if self.config.strict:
            raise UnbalancedMarkupError(span.tag, span.start)
        metrics.unmatched_closes += 1
        stack.append_text(span.text)
        self._diagnose(
            diagnostics, DiagnosticSeverity.WARNING,
            f"Unmatched closing tag </{span.tag}> left as text", span,
        )

    def _diagnose(
        self,
        diagnostics: DiagnosticLog,
        severity: DiagnosticSeverity,
        message: str,
        span: TagSpan,
        details: Optional[dict] = None
    ) -> None:
        self.logger.debug(message, extra={"offset": span.start, "text": span.text})
        if self.config.record_diagnostics:
            diagnostics.add(severity, message, "tokenizer", span.position, details)
