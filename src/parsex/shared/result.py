"""Diagnostic and metric types attached to parsed documents.

Tolerated anomalies found while tokenizing (unmatched closing tags, duplicate
attributes, skipped declarations, unclosed nodes) are recorded as diagnostic
entries instead of being raised.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Tolerated anomalies
    ERROR = auto()      # Input that could not be represented in the tree


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to a JSON-friendly dictionary."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.position is not None:
            result["position"] = dict(self.position)
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class ParseMetrics:
    """Counters and timing for a single parse operation."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    nodes_created: int = 0
    comments_found: int = 0
    unmatched_closes: int = 0
    unclosed_nodes: int = 0
    skipped_declarations: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def is_balanced(self) -> bool:
        """Check whether every opened tag was closed and every close matched."""
        return self.unmatched_closes == 0 and self.unclosed_nodes == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "nodes_created": self.nodes_created,
            "comments_found": self.comments_found,
            "unmatched_closes": self.unmatched_closes,
            "unclosed_nodes": self.unclosed_nodes,
            "skipped_declarations": self.skipped_declarations,
        }


class DiagnosticLog:
    """Ordered collection of diagnostics for one document."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.entries: List[DiagnosticEntry] = []

    def add(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> DiagnosticEntry:
        """Append a diagnostic entry and return it."""
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        )
        self.entries.append(entry)
        return entry

    def by_severity(self, severity: DiagnosticSeverity) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [entry for entry in self.entries if entry.severity == severity]

    def has_errors(self) -> bool:
        """Check if any error diagnostics were recorded."""
        return any(
            entry.severity == DiagnosticSeverity.ERROR for entry in self.entries
        )

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
