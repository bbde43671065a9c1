"""Shared utilities for markup parsing.

This module provides configuration objects, exceptions, diagnostic types and
logging helpers used across the tokenizer, tree, render and API layers.
"""

from .config import (
    DEFAULT_INLINE_TAGS,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    RenderConfig,
    TokenizerConfig,
)
from .errors import (
    DuplicateAttributeError,
    IntegrityError,
    ParsexError,
    UnbalancedMarkupError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticLog,
    DiagnosticSeverity,
    ParseMetrics,
)

__all__ = [
    "DEFAULT_INLINE_TAGS",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "RenderConfig",
    "TokenizerConfig",
    "DuplicateAttributeError",
    "IntegrityError",
    "ParsexError",
    "UnbalancedMarkupError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticLog",
    "DiagnosticSeverity",
    "ParseMetrics",
]
