"""Criteria-based node search.

A Query accumulates AND-combined criteria and evaluates them while driving a
TraversalCursor over the document's node stack.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Set

from parsex.shared import get_logger

from .node import ROOT_ID, Node

if TYPE_CHECKING:
    from .stack import NodeStack


@dataclass
class SearchCriteria:
    """Filter criteria; unset criteria match every node."""

    parent_id: int = ROOT_ID
    tag: Optional[str] = None
    id: Optional[str] = None
    class_name: Optional[str] = None
    attr_equals: Dict[str, str] = field(default_factory=dict)
    attr_contains: Dict[str, str] = field(default_factory=dict)
    attr_present: Set[str] = field(default_factory=set)
    contents: Optional[str] = None
    contents_contains: Optional[str] = None
    excludes: Set[int] = field(default_factory=set)

    def matches(self, node: Node) -> bool:
        """Check a node against every set criterion."""
        if self.tag is not None and node.tag != self.tag:
            return False
        if self.id is not None and not node.attr_equals("id", self.id):
            return False
        if self.class_name is not None and not node.has_class(self.class_name):
            return False
        for key, value in self.attr_equals.items():
            if not node.attr_equals(key, value):
                return False
        for key, substring in self.attr_contains.items():
            if not node.attr_contains(key, substring):
                return False
        for key in self.attr_present:
            if not node.has_attr(key):
                return False
        # Contents are rendered on demand, so test them last
        if self.contents is not None or self.contents_contains is not None:
            contents = node.contents
            if self.contents is not None and contents != self.contents:
                return False
            if (
                self.contents_contains is not None
                and self.contents_contains not in contents
            ):
                return False
        return True


class Query:
    """Builder for node searches over one document.

    Every builder method returns the query itself so calls can be chained.
    Results are the document's live nodes in document order.

    Examples:
        >>> doc = parse('<ul><li class="x y">a</li><li>b</li></ul>')
        >>> [n.contents for n in doc.query().tag("li").class_("y")]
        ['a']
    """

    def __init__(self, stack: "NodeStack") -> None:
        self.stack = stack
        self.criteria = SearchCriteria()
        self._limit: Optional[int] = None
        self.logger = get_logger(__name__, stack.correlation_id, "query")

    def scope(self, parent_id: int) -> "Query":
        """Search only below ``parent_id`` (0 for the whole document)."""
        self.criteria.parent_id = parent_id
        return self

    parent_id = scope

    def tag(self, tag: str) -> "Query":
        """Search by tag name."""
        self.criteria.tag = tag
        return self

    def id(self, value: str) -> "Query":
        """Search by ``id`` attribute."""
        self.criteria.id = value
        return self

    def class_(self, name: str) -> "Query":
        """Search by membership in the whitespace-separated ``class`` attribute."""
        self.criteria.class_name = name
        return self

    def attr(self, key: str, value: str) -> "Query":
        """Search by exact attribute value."""
        self.criteria.attr_equals[key] = value
        return self

    def attr_contains(self, key: str, substring: str) -> "Query":
        """Search by substring of an attribute value."""
        self.criteria.attr_contains[key] = substring
        return self

    def has_attr(self, key: str) -> "Query":
        """Search for nodes carrying an attribute, whatever its value."""
        self.criteria.attr_present.add(key)
        return self

    def contents(self, contents: str) -> "Query":
        """Search by exact contents between the opening and closing tags."""
        self.criteria.contents = contents
        return self

    def contents_contains(self, search: str) -> "Query":
        """Search by substring of the contents."""
        self.criteria.contents_contains = search
        return self

    def exclude(self, *node_ids: int) -> "Query":
        """Hide the subtrees rooted at ``node_ids`` from this search."""
        self.criteria.excludes.update(node_ids)
        return self

    def limit(self, count: int) -> "Query":
        """Stop after ``count`` matches."""
        if count < 0:
            raise ValueError("limit must be >= 0")
        self._limit = count
        return self

    def iter(self) -> Iterator[Node]:
        """Lazily yield matching nodes in document order (single pass)."""
        criteria = self.criteria
        cursor = self.stack.cursor(criteria.parent_id, criteria.excludes)
        found = 0
        visited = 0

        if self._limit == 0:
            return
        for node_id in cursor:
            visited += 1
            node = self.stack.node(node_id)
            if not criteria.matches(node):
                continue
            found += 1
            yield node
            if self._limit is not None and found >= self._limit:
                break

        self.logger.debug(
            "Query completed",
            extra={
                "scope": criteria.parent_id,
                "visited": visited,
                "matched": found,
            }
        )

    def __iter__(self) -> Iterator[Node]:
        return self.iter()

    def to_list(self) -> List[Node]:
        """Materialize matching nodes in document order."""
        return list(self.iter())

    def ids(self) -> List[int]:
        """Ids of matching nodes in document order."""
        return [node.id for node in self.iter()]

    def first(self) -> Optional[Node]:
        """First matching node, or None."""
        return next(self.iter(), None)

    def count(self) -> int:
        """Number of matching nodes."""
        return sum(1 for _ in self.iter())
