"""Tests for the pretty rebuild."""

from parsex.api import parse
from parsex.render import rebuild
from parsex.shared import ParserConfig, RenderConfig


class TestRebuild:
    """Test re-indentation and comment stripping."""

    def test_block_and_inline_tags(self):
        """Test block tags get their own line while inline tags stay in text."""
        document = parse("<div><p>Hello <b>world</b></p></div>")

        assert document.rebuild() == (
            "<div>\n"
            "  <p>\n"
            "    Hello <b>world</b>\n"
            "  </p>\n"
            "</div>\n"
        )

    def test_comments_are_stripped(self):
        """Test comments never appear in the rebuild."""
        document = parse("<div><!-- c --><p>a</p></div>")

        assert document.rebuild() == "<div>\n  <p>\n    a\n  </p>\n</div>\n"

    def test_whitespace_collapsed(self):
        """Test text runs are whitespace-collapsed and blank lines removed."""
        document = parse("<div>\n\n\n   some    text\n\n</div>")

        assert document.rebuild() == "<div>\n  some text\n</div>\n"

    def test_inline_list_items(self):
        """Test inline tags in sequence share a line."""
        document = parse("<ul>\n  <li>one</li>\n  <li>two</li>\n</ul>")

        assert document.rebuild() == "<ul>\n  <li>one</li> <li>two</li>\n</ul>\n"

    def test_custom_indent(self):
        """Test indentation width from configuration."""
        document = parse("<div><p>a</p></div>", ParserConfig.pretty(indent=4))

        assert document.rebuild() == "<div>\n    <p>\n        a\n    </p>\n</div>\n"

    def test_custom_inline_tags(self):
        """Test a configuration that treats p as inline."""
        stack = parse("<div><p>a</p></div>").stack
        config = RenderConfig(inline_tags=frozenset({"p"}))

        assert rebuild(stack, config) == "<div>\n  <p>a</p>\n</div>\n"

    def test_unclosed_nodes_indent_following_content(self):
        """Test an unclosed node still indents what follows it."""
        document = parse("<div><section>text</div>")

        assert document.rebuild() == (
            "<div>\n"
            "  <section>\n"
            "    text\n"
            "</div>\n"
        )

    def test_edits_are_applied(self):
        """Test the rebuild uses edited tags and overridden contents."""
        document = parse("<div><p>a</p></div>")
        document[2].set_attr("class", "x")
        document[1].set_contents("replaced")

        assert document.rebuild() == "<div>\n  replaced\n</div>\n"

    def test_empty_document(self):
        """Test rebuilding an empty document."""
        assert parse("").rebuild() == ""
        assert parse("   \n  ").rebuild() == ""

    def test_rebuild_is_stable(self):
        """Test rebuilding a rebuilt document changes nothing."""
        first = parse("<div><p>Hello <b>world</b></p><p>x</p></div>").rebuild()

        assert parse(first).rebuild() == first
