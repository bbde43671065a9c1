"""Tests for the pre-order traversal cursor."""

import time

from parsex.api import parse
from parsex.tree import TraversalCursor

# a1 ( b2, c3 ( d4 ) ), e5
SAMPLE = "<a><b></b><c><d></d></c></a><e></e>"


class TestTraversalCursor:
    """Test cursor ordering, scoping and exclusion."""

    def test_pre_order(self):
        """Test the full walk visits every node in document order."""
        stack = parse(SAMPLE).stack

        assert list(TraversalCursor(stack)) == [1, 2, 3, 4, 5]

    def test_scope_never_rises_above_root(self):
        """Test a scoped walk stays inside the subtree."""
        stack = parse(SAMPLE).stack

        assert list(TraversalCursor(stack, scope_root=3)) == [4]
        assert list(TraversalCursor(stack, scope_root=1)) == [2, 3, 4]
        assert list(TraversalCursor(stack, scope_root=4)) == []

    def test_excluded_subtree_is_skipped(self):
        """Test exclusion hides a node and everything below it."""
        stack = parse(SAMPLE).stack

        assert list(TraversalCursor(stack, excludes=[3])) == [1, 2, 5]
        assert list(TraversalCursor(stack, excludes=[1])) == [5]

    def test_excluded_scope_root_yields_nothing(self):
        """Test excluding the scope root itself."""
        stack = parse(SAMPLE).stack

        assert list(TraversalCursor(stack, scope_root=3, excludes=[3])) == []

    def test_unknown_scope_yields_nothing(self):
        """Test a scope root that does not exist."""
        stack = parse(SAMPLE).stack

        assert list(TraversalCursor(stack, scope_root=42)) == []

    def test_advance_and_reset(self):
        """Test manual stepping, exhaustion and reset."""
        stack = parse("<p></p><p></p>").stack
        cursor = TraversalCursor(stack)

        assert cursor.advance() == 1
        assert cursor.position == 1
        assert cursor.advance() == 2
        assert cursor.advance() is None
        assert cursor.advance() is None

        cursor.reset()
        assert cursor.position == 0
        assert cursor.advance() == 1

    def test_independent_cursors_do_not_interfere(self):
        """Test two cursors over one stack keep separate positions."""
        stack = parse(SAMPLE).stack
        first = TraversalCursor(stack)
        second = TraversalCursor(stack)

        assert first.advance() == 1
        assert first.advance() == 2
        assert second.advance() == 1
        assert first.advance() == 3

    def test_comments_are_visited(self):
        """Test comment nodes take part in traversal."""
        stack = parse("<div><!-- c --><p></p></div>").stack

        assert list(TraversalCursor(stack)) == [1, 2, 3]

    def test_empty_document(self):
        """Test walking a document without nodes."""
        assert list(TraversalCursor(parse("just text").stack)) == []

    def test_wide_sibling_list_walks_in_linear_time(self):
        """Test walking a large flat document stays fast."""
        document = parse("<i></i>" * 40000)

        start_time = time.time()
        count = document.query().count()
        total_time = time.time() - start_time

        assert count == 40000
        assert total_time < 2.0

    def test_excluded_siblings_are_skipped_in_place(self):
        """Test next-sibling lookup skips excluded ids without reordering."""
        stack = parse("<a></a><b></b><c></c><d></d>").stack

        assert stack.next_sibling(1, excludes={2, 3}) == 4
        assert stack.next_sibling(4) is None
        assert list(TraversalCursor(stack, excludes=[2, 3])) == [1, 4]
