"""Tests for the performance profiling module."""

import json
from unittest.mock import MagicMock, patch

from parsex.tools.profiling import (
    LayerPerformance,
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    benchmark_document_operations,
)


def make_session(session_id, layers, input_size=1000, duration=1.0):
    session = ProfilingSession(
        session_id=session_id,
        start_time=100.0,
        end_time=100.0 + duration,
        input_size=input_size,
    )
    session.layers.extend(layers)
    return session


def make_layer(name, duration, memory_delta=0):
    return LayerPerformance(
        layer_name=name,
        start_time=100.0,
        end_time=100.0 + duration,
        memory_start=1000,
        memory_end=1000 + memory_delta,
        cpu_percent=0.0,
    )


class TestLayerPerformance:
    """Test LayerPerformance data class."""

    def test_layer_performance_creation(self):
        """Test derived values."""
        layer_perf = LayerPerformance(
            layer_name="tokenization",
            start_time=1000.0,
            end_time=1001.0,
            memory_start=1024,
            memory_end=2048,
            cpu_percent=25.0,
            operations_count=100
        )

        assert layer_perf.duration_ms == 1000.0
        assert layer_perf.memory_delta == 1024
        assert layer_perf.ops_per_second == 100.0
        assert layer_perf.to_dict()["layer_name"] == "tokenization"

    def test_zero_duration(self):
        """Test rates with no elapsed time."""
        assert make_layer("query", 0.0).ops_per_second == 0.0


class TestProfilingSession:
    """Test ProfilingSession data class."""

    def test_duration_and_throughput(self):
        """Test derived values."""
        session = make_session("s", [], input_size=1024 * 1024, duration=2.0)

        assert session.total_duration_ms == 2000.0
        assert session.throughput_mb_per_s == 0.5

    def test_layer_lookup(self):
        """Test finding a phase by name."""
        render = make_layer("render", 0.1)
        session = make_session("s", [make_layer("tokenization", 0.2), render])

        assert session.layer("render") is render
        assert session.layer("missing") is None


class TestPerformanceReport:
    """Test PerformanceReport aggregation."""

    def test_empty_report(self):
        """Test averages without sessions."""
        report = PerformanceReport(sessions=[], generation_time=0.0)

        assert report.session_count == 0
        assert report.average_duration_ms == 0.0
        assert report.average_throughput_mb_per_s == 0.0

    def test_layer_averages(self):
        """Test per-phase averages across sessions."""
        report = PerformanceReport(
            sessions=[
                make_session("a", [make_layer("render", 0.1)]),
                make_session("b", [make_layer("render", 0.3)]),
            ],
            generation_time=0.0,
        )

        assert round(report.layer_averages()["render"], 6) == 200.0
        assert report.to_dict()["summary"]["session_count"] == 2


class TestPerformanceProfiler:
    """Test the profiler itself."""

    def test_session_and_layers(self):
        """Test recording a session with phases."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)

        with profiler.profile_session("doc", 10) as session:
            assert profiler.current_session is session
            with profiler.profile_layer(session, "tokenization", 3) as layer:
                pass

        assert profiler.current_session is None
        assert profiler.sessions == [session]
        assert session.layers == [layer]
        assert layer.operations_count == 3
        assert layer.memory_delta == 0

    def test_memory_tracking_uses_psutil(self):
        """Test RSS and CPU samples come from psutil.Process."""
        process = MagicMock()
        process.memory_info.side_effect = [MagicMock(rss=1000), MagicMock(rss=1500)]
        process.cpu_percent.return_value = 12.5

        with patch("parsex.tools.profiling.psutil.Process", return_value=process):
            profiler = PerformanceProfiler()
            session = profiler.start_session("doc")
            with profiler.profile_layer(session, "render") as layer:
                pass
            profiler.end_session(session)

        assert layer.memory_delta == 500
        assert layer.cpu_percent == 12.5

    def test_save_report(self, tmp_path):
        """Test writing a report as JSON."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        with profiler.profile_session("doc", 5) as session:
            with profiler.profile_layer(session, "query"):
                pass
        output = tmp_path / "report.json"

        profiler.save_report(profiler.generate_report(), output)

        data = json.loads(output.read_text())
        assert data["summary"]["session_count"] == 1
        assert data["sessions"][0]["layers"][0]["layer_name"] == "query"

    def test_clear_sessions(self):
        """Test clearing stored sessions."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        with profiler.profile_session("doc"):
            pass

        profiler.clear_sessions()

        assert profiler.sessions == []


class TestRecommendations:
    """Test optimization recommendations."""

    def test_no_data(self):
        """Test recommendations without sessions."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        report = PerformanceReport(sessions=[], generation_time=0.0)

        assert profiler.get_optimization_recommendations(report) == [
            "No profiling data available for analysis"
        ]

    def test_query_bottleneck(self):
        """Test a dominating query phase."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        session = make_session(
            "s", [make_layer("tokenization", 0.1), make_layer("query", 0.8)]
        )
        report = PerformanceReport(sessions=[session], generation_time=0.0)

        recommendations = profiler.get_optimization_recommendations(report)

        assert any("'query'" in item and "scope()" in item for item in recommendations)

    def test_memory_growth(self):
        """Test memory growth far above the input size."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        session = make_session(
            "big", [make_layer("tokenization", 0.1, memory_delta=10_000)], input_size=100
        )
        report = PerformanceReport(sessions=[session], generation_time=0.0)

        recommendations = profiler.get_optimization_recommendations(report)

        assert any("High memory usage" in item for item in recommendations)

    def test_optimal(self):
        """Test a balanced, fast report."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        session = make_session(
            "s",
            [make_layer(name, 0.1) for name in ("tokenization", "query", "render")],
            duration=0.5,
        )
        report = PerformanceReport(sessions=[session], generation_time=0.0)

        assert profiler.get_optimization_recommendations(report) == [
            "Performance appears optimal based on current analysis"
        ]


class TestBenchmark:
    """Test the document benchmark helper."""

    def test_benchmark_document_operations(self):
        """Test every phase is profiled for every iteration."""
        markup = "<div><p>a</p><p>b</p></div>"

        report = benchmark_document_operations(markup, iterations=3, enable_memory_tracking=False)

        assert report.session_count == 3
        session = report.sessions[0]
        assert [layer.layer_name for layer in session.layers] == [
            "tokenization", "query", "render", "rebuild",
        ]
        assert session.layer("tokenization").operations_count == 3
        assert session.metadata["node_count"] == 3
        assert session.metadata["balanced"] is True
