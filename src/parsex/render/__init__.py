"""Rendering of node stacks back to markup text.

Key Components:
    render_document: Full render with node edits applied
    render_subtree: Rendered contents of a single node
    render_outer: A single node including its own tags
    rebuild: Pretty-printed document with comments stripped
"""

from .pretty import rebuild
from .renderer import (
    attribute_string,
    build_close_tag,
    build_open_tag,
    build_self_closed_tag,
    render_document,
    render_outer,
    render_range,
    render_subtree,
)

__all__ = [
    "attribute_string",
    "build_close_tag",
    "build_open_tag",
    "build_self_closed_tag",
    "rebuild",
    "render_document",
    "render_outer",
    "render_range",
    "render_subtree",
]
