"""Pretty rebuild: re-indented, re-wrapped markup without comments."""

import re
from typing import List, Optional

from parsex.shared import RenderConfig, get_logger
from parsex.tree import Node, NodeStack

from .renderer import closing_text, opening_text

BLANK_LINES = re.compile(r"\n[ \t]*(?:\n[ \t]*)+")

logger = get_logger(__name__, component="pretty")


class _PrettyWriter:
    """Accumulates output lines, tracking line starts and pending spaces."""

    def __init__(self, indent: int) -> None:
        self.indent = indent
        self.parts: List[str] = []
        self.at_line_start = True
        self.pending_space = False

    def newline(self) -> None:
        if not self.at_line_start:
            self.parts.append("\n")
            self.at_line_start = True
        self.pending_space = False

    def write(self, text: str, level: int) -> None:
        if self.at_line_start:
            self.parts.append(" " * (self.indent * level))
        elif self.pending_space:
            self.parts.append(" ")
        self.parts.append(text)
        self.at_line_start = False
        self.pending_space = False

    def block(self, text: str, level: int) -> None:
        self.newline()
        self.write(text, level)
        self.newline()

    def text(self, raw: str, level: int) -> None:
        if not raw:
            return
        words = raw.split()
        if not words:
            self.pending_space = not self.at_line_start
            return
        if raw[0].isspace() and not self.at_line_start:
            self.pending_space = True
        self.write(" ".join(words), level)
        self.pending_space = raw[-1].isspace()

    def getvalue(self) -> str:
        return "".join(self.parts)


def _pop_to_parent(ancestors: List[int], node: Node) -> None:
    if node.parent_id in ancestors:
        while ancestors[-1] != node.parent_id:
            ancestors.pop()
    else:
        ancestors.clear()


def rebuild(stack: NodeStack, config: Optional[RenderConfig] = None) -> str:
    """Rebuild the document with one block tag per line.

    Comments are dropped. Indentation comes from an explicit ancestor stack
    that is popped back to each node's parent before the node is written.
    Tags listed in ``config.inline_tags`` are written inside the current
    line; all other tags get their own indented line.

    Args:
        stack: Node stack to rebuild
        config: Render configuration (indent width, inline tags)

    Returns:
        Pretty-printed markup ending with a newline, or "" for empty input
    """
    config = config or RenderConfig()
    writer = _PrettyWriter(config.indent)
    ancestors: List[int] = []
    buffer = stack.buffer
    position = 0

    for marker in stack.markers_between(0, stack.buffer_length):
        if marker.offset < position:
            continue
        writer.text(buffer[position:marker.offset], len(ancestors))
        position = marker.end

        node = stack.get(marker.node_id)
        if node is None or node.is_comment:
            continue
        inline = config.is_inline(node.tag)

        if marker.closing:
            if node.id in ancestors:
                while ancestors.pop() != node.id:
                    pass
            text = closing_text(node)
            if inline:
                writer.write(text, len(ancestors))
            else:
                writer.block(text, len(ancestors))
            continue

        _pop_to_parent(ancestors, node)
        level = len(ancestors)
        text = opening_text(node)
        if inline:
            writer.write(text, level)
        else:
            writer.block(text, level)

        if node.is_closed and node.has_contents_override:
            closing = stack.close_marker_of(node.id)
            if closing is not None:
                writer.text(node.contents, level + 1)
                close_text = closing_text(node)
                if inline:
                    writer.write(close_text, level)
                else:
                    writer.block(close_text, level)
                position = closing.end
                continue

        if not node.is_self_closing:
            ancestors.append(node.id)

    writer.text(buffer[position:], len(ancestors))

    output = writer.getvalue()
    output = "\n".join(line.rstrip() for line in output.split("\n"))
    if config.collapse_blank_lines:
        output = BLANK_LINES.sub("\n", output)
    output = output.strip("\n")

    logger.debug(
        "Rebuilt document",
        extra={"node_count": len(stack), "output_length": len(output)}
    )
    return output + "\n" if output else ""
