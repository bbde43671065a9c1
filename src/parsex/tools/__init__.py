"""Developer tools for parsex.

Provides performance profiling of parse, query and render phases.
"""

from .profiling import (
    LayerPerformance,
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    benchmark_document_operations,
)

__all__ = [
    "LayerPerformance",
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
    "benchmark_document_operations",
]
