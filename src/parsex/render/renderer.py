"""Reconstruction of markup text from the placeholder buffer.

Rendering walks the recorded marker positions in buffer order and replaces
each marker with text generated from the current state of its node. Nodes
that were never edited emit their original source text, so an unmodified
document renders back byte for byte. This includes unclosed tags: an unedited
unclosed node keeps its original opening tag (for example ``<br>``) rather
than being rewritten as a self-closed tag. Only edited unclosed or
self-closing nodes are emitted as ``<tag ... />``. Missing markers or unknown
node ids are skipped silently.
"""

from typing import Dict, Iterable, List, Optional, Set

from parsex.shared import get_logger
from parsex.tree import ROOT_ID, Node, NodeStack

logger = get_logger(__name__, component="renderer")


def _quote(value: str) -> str:
    if '"' in value and "'" not in value:
        return f"'{value}'"
    return '"' + value.replace('"', "&quot;") + '"'


def attribute_string(attributes: Dict[str, str], extra: str = "") -> str:
    """Serialize attributes in mapping order followed by the leftover text."""
    parts = [f"{key}={_quote(value)}" for key, value in attributes.items()]
    if extra:
        parts.append(extra)
    return " ".join(parts)


def build_open_tag(node: Node) -> str:
    """Generate ``<tag attrs extra>`` from a node's current state."""
    attrs = attribute_string(node.attributes, node.attr_extra)
    return f"<{node.tag} {attrs}>" if attrs else f"<{node.tag}>"


def build_self_closed_tag(node: Node) -> str:
    """Generate ``<tag attrs extra/>`` from a node's current state."""
    attrs = attribute_string(node.attributes, node.attr_extra)
    return f"<{node.tag} {attrs}/>" if attrs else f"<{node.tag}/>"


def build_close_tag(node: Node) -> str:
    """Generate ``</tag>``."""
    return f"</{node.tag}>"


def opening_text(node: Node) -> str:
    """Text substituted for a node's opening marker."""
    if node.is_comment:
        return node.contents
    if not node.tag_modified:
        return node.source_open
    if node.is_closed:
        return build_open_tag(node)
    return build_self_closed_tag(node)


def closing_text(node: Node) -> str:
    """Text substituted for a node's closing marker."""
    if not node.tag_modified and node.source_close:
        return node.source_close
    return build_close_tag(node)


def hidden_ids(stack: NodeStack, excludes: Iterable[int]) -> Set[int]:
    """Expand subtree roots into the full set of ids they hide."""
    hidden: Set[int] = set()
    for node_id in excludes:
        if node_id in stack and node_id not in hidden:
            hidden.add(node_id)
            hidden.update(stack.descendants(node_id))
    return hidden


def render_range(
    stack: NodeStack,
    start: int,
    end: int,
    hidden: Optional[Set[int]] = None
) -> str:
    """Render the buffer slice ``[start, end)`` with every marker resolved.

    Args:
        stack: Node stack owning the buffer
        start: First buffer offset to render
        end: Buffer offset to stop at
        hidden: Node ids to leave out entirely

    Returns:
        Markup text without placeholder markers
    """
    hidden = hidden or set()
    buffer = stack.buffer
    output: List[str] = []
    position = start

    for marker in stack.markers_between(start, end):
        if marker.offset < position:
            continue
        output.append(buffer[position:marker.offset])
        position = marker.end

        node = stack.get(marker.node_id)
        if node is None:
            continue

        if marker.node_id in hidden:
            closing = stack.close_marker_of(node.id)
            if not marker.closing and closing is not None and closing.end <= end:
                position = closing.end
            continue

        if marker.closing:
            output.append(closing_text(node))
            continue

        output.append(opening_text(node))
        if node.is_closed and node.has_contents_override:
            closing = stack.close_marker_of(node.id)
            if closing is not None and closing.end <= end:
                output.append(node.contents)
                output.append(closing_text(node))
                position = closing.end

    output.append(buffer[position:end])
    return "".join(output)


def render_document(stack: NodeStack, excludes: Iterable[int] = ()) -> str:
    """Render the whole document with all edits applied.

    Args:
        stack: Node stack to render
        excludes: Subtree roots to leave out

    Returns:
        Markup text
    """
    hidden = hidden_ids(stack, excludes)
    html = render_range(stack, 0, stack.buffer_length, hidden)
    logger.debug(
        "Rendered document",
        extra={
            "node_count": len(stack),
            "hidden_count": len(hidden),
            "output_length": len(html),
        }
    )
    return html


def render_subtree(
    stack: NodeStack,
    node_id: int,
    excludes: Iterable[int] = ()
) -> str:
    """Render the contents of one node (0 renders the whole document)."""
    if node_id == ROOT_ID:
        return render_document(stack, excludes)

    node = stack.get(node_id)
    if node is None:
        return ""
    if node.has_contents_override or node.is_comment:
        return node.contents

    span = stack.inner_span(node_id)
    if span is None:
        return ""
    return render_range(stack, span[0], span[1], hidden_ids(stack, excludes))


def render_outer(
    stack: NodeStack,
    node_id: int,
    excludes: Iterable[int] = ()
) -> str:
    """Render one node including its own tags (0 renders the whole document).

    An unclosed node is rendered together with the nodes that follow it as
    its descendants, since nothing else delimits its extent.
    """
    if node_id == ROOT_ID:
        return render_document(stack, excludes)

    node = stack.get(node_id)
    if node is None or node_id in excludes:
        return ""

    span = stack.outer_span(node_id)
    if span is None:
        return ""
    start, end = span
    if node.is_open:
        for descendant_id in stack.descendants(node_id):
            descendant_span = stack.outer_span(descendant_id)
            if descendant_span is not None:
                end = max(end, descendant_span[1])
    return render_range(stack, start, end, hidden_ids(stack, excludes))
