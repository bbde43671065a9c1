"""Tests for the Document surface."""

import pytest

from parsex.api import Document, parse
from parsex.shared import DiagnosticSeverity, ParserConfig
from parsex.tree import NodeStack, Query

PAGE = (
    '<html><body>'
    '<div id="nav"><a href="/">home</a></div>'
    '<div id="main"><h1>Title</h1><!-- note --><p class="x">text</p></div>'
    '</body></html>'
)


@pytest.fixture
def document():
    return parse(PAGE)


class TestDocumentAccess:
    """Test lookups and container protocol."""

    def test_len_iter_contains(self, document):
        """Test container protocol over nodes."""
        assert len(document) == 8
        assert [node.tag for node in document][:3] == ["html", "body", "div"]
        assert 5 in document
        assert 99 not in document

    def test_getitem(self, document):
        """Test indexing by id."""
        assert document[3].attr("id") == "nav"
        with pytest.raises(KeyError):
            document[99]

    def test_get_returns_snapshot(self, document):
        """Test get() returns a detached copy."""
        snapshot = document.get(3)
        snapshot.set_attr("id", "changed")

        assert document[3].attr("id") == "nav"
        assert document.get(99) is None

    def test_get_mutable_returns_live_node(self, document):
        """Test get_mutable() edits the document."""
        node = document.get_mutable(3)
        node.set_attr("id", "menu")

        assert '<div id="menu">' in document.render()
        assert document.get_mutable(99) is None

    def test_query_and_children_of(self, document):
        """Test query entry points."""
        assert isinstance(document.query(), Query)
        assert document.children_of(5).tag("p").ids() == [8]
        assert document.children_of(42).ids() == []

    def test_traverse(self, document):
        """Test traversal with scope and exclusions."""
        assert [node.id for node in document.traverse(5)] == [6, 7, 8]
        assert [node.id for node in document.traverse(excludes=[5])] == [1, 2, 3, 4]

    def test_root_nodes(self):
        """Test top-level nodes."""
        document = parse("<p>a</p><!-- c --><p>b</p>")

        assert [node.id for node in document.root_nodes] == [1, 2, 3]

    def test_buffer_and_str(self, document):
        """Test buffer exposure and string conversion."""
        assert "\x00" in document.buffer
        assert str(document) == PAGE


class TestDocumentRendering:
    """Test render entry points."""

    def test_render_round_trip(self, document):
        """Test the unmodified document renders unchanged."""
        assert document.render() == PAGE

    def test_render_with_excludes(self, document):
        """Test excluding a subtree from the render."""
        assert document.render(excludes=[3]) == PAGE.replace(
            '<div id="nav"><a href="/">home</a></div>', ""
        )

    def test_render_subtree(self, document):
        """Test rendering the contents of one node."""
        assert document.render_subtree(3) == '<a href="/">home</a>'
        assert document.render_subtree(0) == PAGE

    def test_rebuild_uses_document_config(self):
        """Test rebuild picks up the render configuration."""
        document = parse("<div><p>a</p></div>", ParserConfig.pretty(indent=1))

        assert document.rebuild() == "<div>\n <p>\n  a\n </p>\n</div>\n"


class TestExtractSubtree:
    """Test copying a subtree into an independent document."""

    def test_extract_subtree(self, document):
        """Test the extracted document is independent and renumbered."""
        extracted = document.extract_subtree(5)

        assert isinstance(extracted, Document)
        assert extracted.render() == (
            '<div id="main"><h1>Title</h1><!-- note --><p class="x">text</p></div>'
        )
        assert [node.tag for node in extracted] == ["div", "h1", "!", "p"]

        extracted[1].set_attr("id", "copy")
        assert '<div id="main">' in document.render()

    def test_extract_with_excludes(self, document):
        """Test excluded nodes are left out of the copy."""
        extracted = document.extract_subtree(5, excludes=[7])

        assert extracted.render() == '<div id="main"><h1>Title</h1><p class="x">text</p></div>'

    def test_extract_whole_document(self, document):
        """Test id 0 copies the whole document."""
        assert document.extract_subtree(0).render() == PAGE

    def test_extract_unknown_or_excluded(self, document):
        """Test ids that cannot be extracted."""
        assert document.extract_subtree(99) is None
        assert document.extract_subtree(5, excludes=[5]) is None

    def test_extract_keeps_config(self):
        """Test the copy is parsed with the same configuration."""
        document = parse("<div><p>a</p></div>", ParserConfig.pretty(indent=4))

        assert document.extract_subtree(1).config.render.indent == 4

    def test_extracted_document_reports_its_own_metrics(self):
        """Test the copy carries metrics for the re-parsed markup."""
        document = parse("<div><p>a</p><!-- c --></div><span>b</span>")
        extracted = document.extract_subtree(1)

        assert extracted.success
        assert extracted.metrics.nodes_created == 3
        assert extracted.metrics.comments_found == 1
        assert extracted.correlation_id == document.correlation_id


class TestDocumentReporting:
    """Test diagnostics, metrics and summary."""

    def test_summary(self, document):
        """Test summary contents of a clean document."""
        summary = document.summary()

        assert summary["success"] is True
        assert summary["node_count"] == 8
        assert summary["tag_counts"]["div"] == 2
        assert summary["tag_counts"]["!"] == 1
        assert summary["metrics"]["nodes_created"] == 8
        assert summary["diagnostics"] == []

    def test_summary_with_diagnostics(self):
        """Test anomalies show up in the summary."""
        document = parse("</x><p>")
        summary = document.summary()

        severities = [entry["severity"] for entry in summary["diagnostics"]]
        assert severities == ["WARNING", "INFO"]
        assert summary["success"] is True
        assert document.diagnostics.by_severity(DiagnosticSeverity.WARNING)

    def test_empty_document_defaults(self):
        """Test a Document built around an empty stack."""
        document = Document(NodeStack())

        assert len(document) == 0
        assert document.render() == ""
        assert document.success
        assert document.config == ParserConfig()
