"""Node store, traversal and search for parsed markup.

Key Components:
    Node: A parsed tag or comment with attributes and contents
    NodeStack: Arena of nodes, adjacency, open-tag stacks and placeholder buffer
    TraversalCursor: Resumable pre-order walk with scoping and exclusions
    Query: AND-combined search criteria evaluated over a cursor
"""

from .cursor import TraversalCursor
from .node import COMMENT_TAG, ROOT_ID, Node
from .query import Query, SearchCriteria
from .stack import Marker, NodeStack, close_marker, open_marker

__all__ = [
    "COMMENT_TAG",
    "ROOT_ID",
    "Marker",
    "Node",
    "NodeStack",
    "Query",
    "SearchCriteria",
    "TraversalCursor",
    "close_marker",
    "open_marker",
]
