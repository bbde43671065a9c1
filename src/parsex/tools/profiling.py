"""Performance profiling tools for parsex.

Times the phases of working with a document (tokenization, querying,
rendering, pretty rebuild), tracks process memory with psutil and turns the
collected sessions into reports and recommendations.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from parsex.api import MarkupParser
from parsex.shared import ParserConfig, get_logger

BOTTLENECK_SHARE = 0.4
MEMORY_FACTOR_LIMIT = 5
SLOW_SESSION_MS = 1000


@dataclass
class LayerPerformance:
    """Performance metrics for one phase of a session."""

    layer_name: str
    start_time: float
    end_time: float
    memory_start: int  # bytes
    memory_end: int  # bytes
    cpu_percent: float
    operations_count: int = 0

    @property
    def duration_ms(self) -> float:
        """Processing duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Memory usage change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def ops_per_second(self) -> float:
        """Operations per second rate."""
        duration_s = self.end_time - self.start_time
        return self.operations_count / duration_s if duration_s > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layer_name": self.layer_name,
            "duration_ms": self.duration_ms,
            "memory_delta": self.memory_delta,
            "cpu_percent": self.cpu_percent,
            "operations_count": self.operations_count,
            "ops_per_second": self.ops_per_second,
        }


@dataclass
class ProfilingSession:
    """Container for one profiled run."""

    session_id: str
    start_time: float
    end_time: float
    input_size: int  # characters
    layers: List[LayerPerformance] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        """Total session duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def throughput_mb_per_s(self) -> float:
        """Processing throughput in MB/s."""
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / (1024 * 1024)) / duration_s

    def layer(self, layer_name: str) -> Optional[LayerPerformance]:
        """Get the first recorded phase with this name."""
        for layer in self.layers:
            if layer.layer_name == layer_name:
                return layer
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "input_size": self.input_size,
            "total_duration_ms": self.total_duration_ms,
            "throughput_mb_s": self.throughput_mb_per_s,
            "metadata": self.metadata,
            "layers": [layer.to_dict() for layer in self.layers],
        }


@dataclass
class PerformanceReport:
    """Aggregated view over profiling sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        """Total number of profiled sessions."""
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        """Average processing duration across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def average_throughput_mb_per_s(self) -> float:
        """Average throughput across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.throughput_mb_per_s for s in self.sessions) / len(self.sessions)

    def layer_averages(self) -> Dict[str, float]:
        """Average duration in milliseconds per phase name."""
        durations: Dict[str, List[float]] = {}
        for session in self.sessions:
            for layer in session.layers:
                durations.setdefault(layer.layer_name, []).append(layer.duration_ms)
        return {name: sum(values) / len(values) for name, values in durations.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation_time": self.generation_time,
            "summary": {
                "session_count": self.session_count,
                "average_duration_ms": self.average_duration_ms,
                "average_throughput_mb_s": self.average_throughput_mb_per_s,
                "layer_averages_ms": self.layer_averages(),
            },
            "sessions": [session.to_dict() for session in self.sessions],
        }


class PerformanceProfiler:
    """Profiler for parse, query and render phases.

    Examples:
        Session profiling:
        >>> profiler = PerformanceProfiler()
        >>> with profiler.profile_session("page", len(markup)) as session:
        ...     with profiler.profile_layer(session, "tokenization"):
        ...         doc = parse(markup)
        ...     with profiler.profile_layer(session, "render"):
        ...         doc.render()
        >>> report = profiler.generate_report()
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        """Initialize performance profiler.

        Args:
            enable_memory_tracking: Whether to sample process RSS and CPU usage
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.current_session: Optional[ProfilingSession] = None
        self.logger = get_logger(__name__, None, "performance_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def sample(self) -> Dict[str, float]:
        """Sample current RSS (bytes) and CPU percent of this process."""
        if self._process is None:
            return {"rss": 0, "cpu_percent": 0.0}
        return {
            "rss": self._process.memory_info().rss,
            "cpu_percent": self._process.cpu_percent(),
        }

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        """Start a new profiling session.

        Args:
            session_id: Unique identifier for the session
            input_size: Size of the markup in characters

        Returns:
            ProfilingSession object for tracking
        """
        session = ProfilingSession(
            session_id=session_id,
            start_time=time.time(),
            end_time=0.0,
            input_size=input_size
        )
        self.current_session = session
        self.logger.info(
            "Started profiling session",
            extra={
                "session_id": session_id,
                "input_size": input_size,
                "memory_tracking": self.enable_memory_tracking
            }
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        """End a profiling session and store results."""
        session.end_time = time.time()
        self.sessions.append(session)

        if self.current_session is session:
            self.current_session = None

        self.logger.info(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
                "layer_count": len(session.layers)
            }
        )

    def profile_layer(
        self,
        session: ProfilingSession,
        layer_name: str,
        operations_count: int = 0
    ) -> "LayerProfiler":
        """Context manager timing one phase of a session."""
        return LayerProfiler(self, session, layer_name, operations_count)

    def profile_session(self, session_id: str, input_size: int = 0) -> "SessionProfiler":
        """Context manager wrapping start_session / end_session."""
        return SessionProfiler(self, session_id, input_size)

    def add_layer_performance(
        self,
        session: ProfilingSession,
        layer_perf: LayerPerformance
    ) -> None:
        """Add phase performance data to a session."""
        session.layers.append(layer_perf)
        self.logger.debug(
            "Added layer performance data",
            extra={
                "session_id": session.session_id,
                "layer_name": layer_perf.layer_name,
                "duration_ms": layer_perf.duration_ms,
                "memory_delta": layer_perf.memory_delta
            }
        )

    def generate_report(self) -> PerformanceReport:
        """Generate a report over all finished sessions."""
        return PerformanceReport(
            sessions=self.sessions.copy(),
            generation_time=time.time()
        )

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        """Save a performance report as JSON."""
        output_path.write_text(json.dumps(report.to_dict(), indent=2))
        self.logger.info(
            "Saved performance report",
            extra={
                "output_path": str(output_path),
                "session_count": report.session_count
            }
        )

    def get_optimization_recommendations(self, report: PerformanceReport) -> List[str]:
        """Generate recommendations based on performance data.

        Args:
            report: Performance report to analyze

        Returns:
            List of human-readable recommendations
        """
        if not report.sessions:
            return ["No profiling data available for analysis"]

        recommendations = []
        avg_duration = report.average_duration_ms

        if avg_duration > SLOW_SESSION_MS:
            recommendations.append(
                "Sessions take over a second; consider splitting the document "
                "or setting tokenizer.max_nodes"
            )

        for layer_name, layer_avg in report.layer_averages().items():
            if avg_duration > 0 and layer_avg > avg_duration * BOTTLENECK_SHARE:
                if layer_name == "query":
                    recommendations.append(
                        "Layer 'query' appears to be a bottleneck. Narrow queries "
                        "with scope() or tag(), and test contents last"
                    )
                else:
                    recommendations.append(
                        f"Layer '{layer_name}' appears to be a bottleneck. "
                        f"Consider optimizing this processing stage"
                    )

        for session in report.sessions:
            growth = sum(layer.memory_delta for layer in session.layers if layer.memory_delta > 0)
            if session.input_size and growth > session.input_size * MEMORY_FACTOR_LIMIT:
                recommendations.append(
                    f"High memory usage in session '{session.session_id}'. "
                    f"Avoid keeping many snapshots or extracted subtrees alive"
                )
                break

        if not recommendations:
            recommendations.append("Performance appears optimal based on current analysis")
        return recommendations

    def clear_sessions(self) -> None:
        """Clear all stored profiling sessions."""
        session_count = len(self.sessions)
        self.sessions.clear()
        self.current_session = None
        self.logger.info(
            "Cleared profiling sessions",
            extra={"cleared_count": session_count}
        )


class LayerProfiler:
    """Context manager for profiling one phase."""

    def __init__(
        self,
        profiler: PerformanceProfiler,
        session: ProfilingSession,
        layer_name: str,
        operations_count: int = 0
    ) -> None:
        self.profiler = profiler
        self.session = session
        self.layer_name = layer_name
        self.operations_count = operations_count
        self.layer_perf: Optional[LayerPerformance] = None

    def __enter__(self) -> LayerPerformance:
        sample = self.profiler.sample()
        self.layer_perf = LayerPerformance(
            layer_name=self.layer_name,
            start_time=time.time(),
            end_time=0.0,
            memory_start=int(sample["rss"]),
            memory_end=0,
            cpu_percent=sample["cpu_percent"],
            operations_count=self.operations_count,
        )
        return self.layer_perf

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.layer_perf is None:
            return
        sample = self.profiler.sample()
        self.layer_perf.end_time = time.time()
        self.layer_perf.memory_end = int(sample["rss"])
        self.profiler.add_layer_performance(self.session, self.layer_perf)


class SessionProfiler:
    """Context manager for profiling a complete session."""

    def __init__(
        self,
        profiler: PerformanceProfiler,
        session_id: str,
        input_size: int = 0
    ) -> None:
        self.profiler = profiler
        self.session_id = session_id
        self.input_size = input_size
        self.session: Optional[ProfilingSession] = None

    def __enter__(self) -> ProfilingSession:
        self.session = self.profiler.start_session(self.session_id, self.input_size)
        return self.session

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session:
            self.profiler.end_session(self.session)


def benchmark_document_operations(
    markup: str,
    iterations: int = 10,
    config: Optional[ParserConfig] = None,
    enable_memory_tracking: bool = True
) -> PerformanceReport:
    """Benchmark tokenization, query, render and rebuild on one document.

    Args:
        markup: Markup to process
        iterations: Number of sessions to run
        config: Parser configuration (lenient by default)
        enable_memory_tracking: Whether to sample RSS and CPU with psutil

    Returns:
        PerformanceReport with one session per iteration
    """
    profiler = PerformanceProfiler(enable_memory_tracking)
    parser = MarkupParser(config)

    for i in range(iterations):
        with profiler.profile_session(f"iteration_{i}", len(markup)) as session:
            with profiler.profile_layer(session, "tokenization") as layer:
                document = parser.parse(markup)
                layer.operations_count = len(document)

            with profiler.profile_layer(session, "query") as layer:
                layer.operations_count = document.query().count()

            with profiler.profile_layer(session, "render", 1):
                document.render()

            with profiler.profile_layer(session, "rebuild", 1):
                document.rebuild()

            session.metadata = {
                "iteration": i,
                "node_count": len(document),
                "balanced": document.metrics.is_balanced,
            }

    return profiler.generate_report()
