"""Node store for parsed markup.

The NodeStack owns every node of a document in a dense arena indexed by id,
the parent -> ordered-children adjacency, the per-tag stacks of open nodes
used to match closing tags, and the placeholder buffer: the source text with
every claimed tag or comment replaced by a reserved marker.

Markers are written once, at the position of the span they replace, and
their offsets are recorded as they are written. All later lookups work on
those offsets, so markup that happens to resemble a marker can never be
mistaken for one.
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from parsex.shared import IntegrityError, get_logger

from .cursor import TraversalCursor
from .node import COMMENT_TAG, ROOT_ID, Node
from .query import Query

MARKER_START = "\x00"
MARKER_END = "\x01"


def open_marker(node_id: int) -> str:
    """Placeholder text standing in for a node's opening tag."""
    return f"{MARKER_START}{node_id}{MARKER_END}"


def close_marker(node_id: int) -> str:
    """Placeholder text standing in for a node's closing tag."""
    return f"{MARKER_START}/{node_id}{MARKER_END}"


@dataclass(frozen=True)
class Marker:
    """Position of one placeholder inside the buffer."""

    offset: int
    end: int
    node_id: int
    closing: bool = False


class NodeStack:
    """Arena of nodes plus the placeholder buffer they are anchored in.

    The stack is built front to back by the tokenizer: text runs are appended
    verbatim, claimed spans are replaced by markers. Only one writer may hold
    a stack at a time.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "node_stack")

        self._nodes: List[Optional[Node]] = [None]
        self._children: Dict[int, List[int]] = {}
        self._sibling_index: Dict[int, int] = {}
        self._open: Dict[str, List[int]] = {}
        self._current_parent = ROOT_ID

        self._pieces: List[str] = []
        self._length = 0
        self._buffer: Optional[str] = None
        self._markers: List[Marker] = []
        self._marker_offsets: List[int] = []
        self._open_markers: Dict[int, Marker] = {}
        self._close_markers: Dict[int, Marker] = {}

    # Building

    def append_text(self, text: str) -> None:
        """Append unclaimed source text verbatim."""
        if not text:
            return
        self._pieces.append(text)
        self._length += len(text)
        self._buffer = None

    def _write_marker(self, node_id: int, closing: bool) -> Marker:
        text = close_marker(node_id) if closing else open_marker(node_id)
        marker = Marker(self._length, self._length + len(text), node_id, closing)
        self._pieces.append(text)
        self._length = marker.end
        self._buffer = None
        self._markers.append(marker)
        self._marker_offsets.append(marker.offset)
        if closing:
            self._close_markers[node_id] = marker
        else:
            self._open_markers[node_id] = marker
        return marker

    def _register(self, node: Node) -> None:
        self._nodes.append(node)
        siblings = self._children.setdefault(node.parent_id, [])
        self._sibling_index[node.id] = len(siblings)
        siblings.append(node.id)

    @property
    def next_id(self) -> int:
        """Id the next pushed node will receive."""
        return len(self._nodes)

    @property
    def current_parent(self) -> int:
        """Id of the innermost open node, 0 at top level."""
        return self._current_parent

    def push(
        self,
        tag: str,
        attributes: Dict[str, str],
        attr_extra: str,
        self_closing: bool,
        source: str
    ) -> Node:
        """Register an opening or self-closing tag and replace it with a marker.

        Args:
            tag: Tag name
            attributes: Parsed attribute mapping
            attr_extra: Leftover attribute text
            self_closing: True for ``<tag/>``
            source: Original text of the tag

        Returns:
            The newly created node
        """
        node_id = self.next_id
        open_ids = self._open.setdefault(tag, [])
        if not self_closing:
            open_ids.append(node_id)
        depth = len(open_ids)
        if not open_ids:
            del self._open[tag]

        node = Node(
            id=node_id,
            parent_id=self._current_parent,
            tag=tag,
            attributes=attributes,
            attr_extra=attr_extra,
            depth=depth,
            is_self_closing=self_closing,
            source_open=source,
            _stack=self,
        )
        self._register(node)
        self._write_marker(node_id, closing=False)
        if not self_closing:
            self._current_parent = node_id
        return node

    def push_comment(self, source: str) -> Node:
        """Register a comment; its literal text becomes its contents."""
        node = Node(
            id=self.next_id,
            parent_id=self._current_parent,
            tag=COMMENT_TAG,
            source_open=source,
            _stack=self,
        )
        self._register(node)
        self._write_marker(node.id, closing=False)
        return node

    def close_tag(self, tag: str, source: str) -> Optional[Node]:
        """Close the most recently opened, still-open node named ``tag``.

        Returns:
            The closed node, or None when no node of that name is open. In
            that case nothing is written and the caller keeps the source text.
        """
        open_ids = self._open.get(tag)
        if not open_ids:
            return None

        node_id = open_ids.pop()
        if not open_ids:
            del self._open[tag]
        node = self.node(node_id)
        node.is_closed = True
        node.source_close = source
        self._write_marker(node_id, closing=True)

        self._current_parent = node.parent_id
        return node

    # Lookup

    def node(self, node_id: int) -> Node:
        """Get a node that must exist.

        Raises:
            IntegrityError: If no node has this id
        """
        node = self.get(node_id)
        if node is None:
            raise IntegrityError(f"No node with id {node_id}", node_id)
        return node

    def get(self, node_id: int) -> Optional[Node]:
        """Get a node by id, None when unknown."""
        if node_id <= ROOT_ID or node_id >= len(self._nodes):
            return None
        return self._nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, int) and self.get(node_id) is not None

    def __len__(self) -> int:
        return len(self._nodes) - 1

    def __iter__(self) -> Iterator[Node]:
        """Iterate over nodes in document order."""
        for node in self._nodes[1:]:
            yield node

    def exists(self, node_id: int) -> bool:
        """Check if an id is the virtual root or a known node."""
        return node_id == ROOT_ID or self.get(node_id) is not None

    def parent_of(self, node_id: int) -> int:
        """Get the parent id of a node that must exist."""
        return self.node(node_id).parent_id

    def children_of(self, node_id: int) -> List[int]:
        """Get the ordered child ids of a node (0 for top level)."""
        return list(self._children.get(node_id, ()))

    def has_children(self, node_id: int) -> bool:
        """Check if a node has registered children."""
        return bool(self._children.get(node_id))

    def first_child(self, node_id: int, excludes: Iterable[int] = ()) -> Optional[int]:
        """Get the first child not in ``excludes``."""
        for child_id in self._children.get(node_id, ()):
            if child_id not in excludes:
                return child_id
        return None

    def next_sibling(self, node_id: int, excludes: Iterable[int] = ()) -> Optional[int]:
        """Get the next sibling after ``node_id`` not in ``excludes``."""
        siblings = self._children.get(self.parent_of(node_id))
        index = self._sibling_index.get(node_id)
        if siblings is None or index is None or siblings[index] != node_id:
            raise IntegrityError(
                f"Node {node_id} is missing from its parent's child list", node_id
            )
        for position in range(index + 1, len(siblings)):
            if siblings[position] not in excludes:
                return siblings[position]
        return None

    def open_stack(self, tag: str) -> List[int]:
        """Ids of still-open nodes named ``tag``, innermost last."""
        return list(self._open.get(tag, ()))

    def unclosed_nodes(self) -> List[Node]:
        """Elements that never saw a closing tag."""
        return [node for node in self if node.is_open]

    def cursor(self, scope_root: int = ROOT_ID, excludes: Iterable[int] = ()) -> TraversalCursor:
        """Create an independent pre-order cursor over this stack."""
        return TraversalCursor(self, scope_root, excludes)

    def query(self, scope_root: int = ROOT_ID) -> Query:
        """Start a query over the subtree below ``scope_root``."""
        return Query(self).scope(scope_root)

    def descendants(self, node_id: int) -> List[int]:
        """Ids of every node below ``node_id`` in document order."""
        return list(self.cursor(node_id))

    # Placeholder buffer

    @property
    def buffer(self) -> str:
        """Source text with claimed spans replaced by markers."""
        if self._buffer is None:
            self._buffer = "".join(self._pieces)
        return self._buffer

    def __str__(self) -> str:
        return self.buffer

    @property
    def buffer_length(self) -> int:
        """Length of the placeholder buffer."""
        return self._length

    def open_marker_of(self, node_id: int) -> Optional[Marker]:
        """Marker anchoring a node's opening tag."""
        return self._open_markers.get(node_id)

    def close_marker_of(self, node_id: int) -> Optional[Marker]:
        """Marker anchoring a node's closing tag, None when unclosed."""
        return self._close_markers.get(node_id)

    def inner_span(self, node_id: int) -> Optional[Tuple[int, int]]:
        """Buffer range between a node's markers, None without a marker pair."""
        opening = self._open_markers.get(node_id)
        closing = self._close_markers.get(node_id)
        if opening is None or closing is None:
            return None
        return opening.end, closing.offset

    def outer_span(self, node_id: int) -> Optional[Tuple[int, int]]:
        """Buffer range covering a node's markers and everything between."""
        opening = self._open_markers.get(node_id)
        if opening is None:
            return None
        closing = self._close_markers.get(node_id)
        return opening.offset, (closing.end if closing else opening.end)

    def raw_contents(self, node_id: int) -> str:
        """Buffer slice between a node's markers, markers included."""
        span = self.inner_span(node_id)
        if span is None:
            return ""
        return self.buffer[span[0]:span[1]]

    def markers_between(self, start: int, end: int) -> List[Marker]:
        """Markers that begin inside ``[start, end)`` in buffer order."""
        first = bisect_left(self._marker_offsets, start)
        last = bisect_left(self._marker_offsets, end)
        return self._markers[first:last]
