"""Node entity for parsed tags and comments.

A Node is owned by the NodeStack that created it. Nodes are never removed
from a stack; they are only mutated (tag name, attributes, leftover attribute
text, contents), and every mutation is visible to later queries and renders
of the owning document.
"""

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .query import Query
    from .stack import NodeStack

COMMENT_TAG = "!"
ROOT_ID = 0


@dataclass(eq=False)
class Node:
    """A single tag or comment discovered in a markup document.

    Attributes:
        id: Pre-order identity, unique within the document (0 is the virtual root)
        parent_id: Id of the enclosing node, 0 for top-level nodes
        tag: Raw tag name, ``!`` for comments
        attributes: Attribute mapping parsed from the opening tag
        attr_extra: Text in the opening tag that is not a key=value pair
        depth: Rank among currently-open nodes sharing this tag name when opened
        is_closed: True once a matching closing tag was seen
        is_self_closing: True for ``<tag/>`` nodes
        source_open: Original text of the opening tag (or the whole comment)
        source_close: Original text of the closing tag, empty until closed
    """

    id: int
    parent_id: int
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    attr_extra: str = ""
    depth: int = 0
    is_closed: bool = False
    is_self_closing: bool = False
    source_open: str = ""
    source_close: str = ""

    _stack: Optional["NodeStack"] = field(default=None, repr=False)
    _contents_override: Optional[str] = field(default=None, repr=False)
    _frozen_contents: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate identity and remember the parsed state of the opening tag."""
        if self.id <= ROOT_ID:
            raise ValueError("Node id must be > 0")
        if self.parent_id < ROOT_ID:
            raise ValueError("Parent id must be >= 0")
        if not self.tag:
            raise ValueError("Node tag cannot be empty")
        self._original = (self.tag, dict(self.attributes), self.attr_extra)

    @property
    def is_comment(self) -> bool:
        """Check if this node is a comment."""
        return self.tag == COMMENT_TAG

    @property
    def is_open(self) -> bool:
        """Check if this node is an element that never saw its closing tag."""
        return not (self.is_closed or self.is_self_closing or self.is_comment)

    @property
    def contents(self) -> str:
        """Text between the opening and closing tags.

        Comments return their literal text including delimiters. Unclosed and
        self-closing nodes return an empty string unless contents were set
        explicitly. Closed nodes return rendered markup with descendant edits
        applied.
        """
        if self._contents_override is not None:
            return self._contents_override
        if self._frozen_contents is not None:
            return self._frozen_contents
        if self.is_comment:
            return self.source_open
        if not self.is_closed or self._stack is None:
            return ""

        from parsex.render.renderer import render_subtree
        return render_subtree(self._stack, self.id)

    @property
    def has_contents_override(self) -> bool:
        """Check if contents were replaced with set_contents()."""
        return self._contents_override is not None

    @property
    def tag_modified(self) -> bool:
        """Check if tag name, attributes or leftover text differ from the source."""
        return (self.tag, self.attributes, self.attr_extra) != self._original

    @property
    def is_modified(self) -> bool:
        """Check if any part of this node differs from the parsed source."""
        return self.tag_modified or self.has_contents_override

    # Attribute access

    def attr(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get single attribute value."""
        return self.attributes.get(key, default)

    def has_attr(self, key: str) -> bool:
        """Check if attribute exists."""
        return key in self.attributes

    def attr_equals(self, key: str, value: str) -> bool:
        """Check if attribute exists and equals value."""
        return key in self.attributes and self.attributes[key] == value

    def attr_contains(self, key: str, substring: str) -> bool:
        """Check if attribute exists and contains substring."""
        return key in self.attributes and substring in self.attributes[key]

    @property
    def classes(self) -> List[str]:
        """Whitespace-separated entries of the ``class`` attribute."""
        return self.attributes.get("class", "").split()

    def has_class(self, name: str) -> bool:
        """Check membership in the ``class`` attribute."""
        return name in self.classes

    # Mutation

    def set_attr(self, key: str, value: str) -> None:
        """Update existing attribute value, or add new attribute."""
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        self.attributes[key] = value

    def del_attr(self, key: str) -> None:
        """Delete attribute if present."""
        self.attributes.pop(key, None)

    def clear_attrs(self) -> None:
        """Remove all attributes."""
        self.attributes.clear()

    def set_attr_extra(self, extra: str) -> None:
        """Replace the non key=value text of the opening tag."""
        self.attr_extra = extra

    def set_tag(self, tag: str) -> None:
        """Rename the tag."""
        if not tag:
            raise ValueError("Node tag cannot be empty")
        self.tag = tag

    def set_contents(self, contents: str) -> None:
        """Replace everything between the opening and closing tags."""
        self._contents_override = contents

    def reset_contents(self) -> None:
        """Drop a previous set_contents() so children render again."""
        self._contents_override = None

    # Navigation

    def children(self) -> "Query":
        """Query scoped to this node's subtree on the owning document."""
        if self._stack is None:
            raise ValueError(f"Node {self.id} is not attached to a document")
        return self._stack.query(self.id)

    def parent(self) -> Optional["Node"]:
        """Get the enclosing node, None for top-level nodes."""
        if self._stack is None or self.parent_id == ROOT_ID:
            return None
        return self._stack.get(self.parent_id)

    def render(self) -> str:
        """Render this node including its own tags."""
        if self._stack is None:
            return ""
        from parsex.render.renderer import render_outer
        return render_outer(self._stack, self.id)

    def snapshot(self) -> "Node":
        """Create a detached copy; its contents are frozen at snapshot time."""
        duplicate = copy.copy(self)
        duplicate.attributes = dict(self.attributes)
        duplicate._original = (
            self._original[0], dict(self._original[1]), self._original[2]
        )
        if self._contents_override is None:
            duplicate._frozen_contents = self.contents
        return duplicate

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "tag": self.tag,
            "attributes": dict(self.attributes),
            "attr_extra": self.attr_extra,
            "depth": self.depth,
            "is_closed": self.is_closed,
            "is_self_closing": self.is_self_closing,
            "contents": self.contents,
        }
