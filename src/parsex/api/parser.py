"""Parsing entry points.

Module-level ``parse`` / ``parse_file`` cover the common case; MarkupParser
keeps a configuration and usage statistics across many documents.

Malformed markup never makes parsing fail: unmatched closing tags, stray
``<`` characters and unterminated comments are kept as text and reported as
diagnostics on the returned Document. Only a strict configuration turns those
conditions into exceptions.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from parsex.shared import (
    DiagnosticLog,
    DiagnosticSeverity,
    ParseMetrics,
    ParserConfig,
    get_logger,
)
from parsex.tokenization import MarkupTokenizer
from parsex.tree import NodeStack

from .document import Document

InputType = Union[str, bytes]

MS_PER_SECOND = 1000
PREVIEW_LENGTH = 100


def _decode(content: InputType) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def parse(
    text: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse markup into a Document.

    Args:
        text: Markup as a string (bytes are decoded as UTF-8)
        config: Parser configuration (lenient by default)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Document owning the node stack

    Raises:
        UnbalancedMarkupError: Strict configuration and an unmatched closing tag
        DuplicateAttributeError: Strict configuration and a repeated attribute

    Examples:
        >>> doc = parse('<div class="a b"><span>x</span></div>')
        >>> doc.query().class_("a").first().tag
        'div'
        >>> doc.render()
        '<div class="a b"><span>x</span></div>'
    """
    return MarkupParser(config, correlation_id).parse(text)


def parse_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse markup from a file.

    A missing or unreadable file does not raise; the returned Document is
    empty and carries an error diagnostic instead.

    Args:
        file_path: Path to the markup file
        encoding: Text encoding (undecodable bytes are replaced)
        config: Parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Document for the file contents

    Examples:
        >>> doc = parse_file('missing.html')
        >>> doc.success
        False
    """
    return MarkupParser(config, correlation_id).parse_file(file_path, encoding)


def _create_error_document(
    error_message: str,
    config: ParserConfig,
    correlation_id: Optional[str],
    processing_time: float,
    details: Optional[Dict[str, Any]] = None
) -> Document:
    """Create an empty document carrying a single error diagnostic."""
    diagnostics = DiagnosticLog(correlation_id)
    diagnostics.add(DiagnosticSeverity.ERROR, error_message, "api_parser", details=details)
    metrics = ParseMetrics(processing_time_ms=processing_time)
    return Document(NodeStack(correlation_id), config, diagnostics, metrics, correlation_id)


class MarkupParser:
    """Reusable parser with a fixed configuration.

    Attributes:
        config: Parser configuration applied to every document
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = MarkupParser(ParserConfig.strict_mode())
        >>> docs = [parser.parse(markup) for markup in pages]
        >>> parser.statistics["total_parses"] == len(pages)
        True
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_parser")
        self._tokenizer = MarkupTokenizer(self.config.tokenizer, correlation_id)

        self._parse_count = 0
        self._total_processing_time = 0.0
        self._total_nodes = 0

    def parse(self, text: InputType) -> Document:
        """Parse markup text into a Document.

        Args:
            text: Markup as a string or UTF-8 bytes

        Returns:
            Document owning the node stack
        """
        start_time = time.time()
        content = _decode(text)

        self.logger.info(
            "Starting parse operation",
            extra={
                "input_type": type(text).__name__,
                "content_length": len(content),
                "content_preview": content[:PREVIEW_LENGTH],
                "strict": self.config.strict,
            }
        )

        result = self._tokenizer.tokenize(content)
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        result.metrics.processing_time_ms = processing_time

        self._parse_count += 1
        self._total_processing_time += processing_time
        self._total_nodes += result.node_count

        self.logger.info(
            "Parse operation completed",
            extra={
                "nodes": result.node_count,
                "diagnostics": len(result.diagnostics),
                "balanced": result.metrics.is_balanced,
                "processing_time_ms": processing_time,
            }
        )

        return Document(
            result.stack,
            self.config,
            result.diagnostics,
            result.metrics,
            self.correlation_id,
        )

    def parse_file(
        self,
        file_path: Union[str, Path],
        encoding: str = "utf-8"
    ) -> Document:
        """Parse a markup file into a Document.

        Args:
            file_path: Path to the markup file
            encoding: Text encoding used to read the file

        Returns:
            Document for the file, or an empty Document with an error diagnostic
        """
        start_time = time.time()
        path_obj = Path(file_path)

        self.logger.info(
            "Starting file parse operation",
            extra={"file_path": str(path_obj), "encoding": encoding}
        )

        error_message = None
        if not path_obj.exists():
            error_message = f"File not found: {path_obj}"
        elif not path_obj.is_file():
            error_message = f"Path is not a file: {path_obj}"
        else:
            try:
                content = path_obj.read_text(encoding=encoding, errors="replace")
            except LookupError:
                error_message = f"Unknown encoding: {encoding}"
            except OSError as e:
                error_message = f"Could not read file {path_obj}: {e}"

        if error_message:
            processing_time = (time.time() - start_time) * MS_PER_SECOND
            self.logger.warning(error_message, extra={"file_path": str(path_obj)})
            return _create_error_document(
                error_message,
                self.config,
                self.correlation_id,
                processing_time,
                {"file_path": str(path_obj)},
            )

        return self.parse(content)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "total_nodes": self._total_nodes,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._total_processing_time = 0.0
        self._total_nodes = 0
        self.logger.info("Parser statistics reset")
