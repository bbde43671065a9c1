"""Document: the programmatic surface over one parsed markup string."""

from typing import Any, Dict, Iterable, Iterator, List, Optional

from parsex.render import rebuild, render_document, render_outer, render_subtree
from parsex.shared import (
    DiagnosticEntry,
    DiagnosticLog,
    ParseMetrics,
    ParserConfig,
    get_logger,
)
from parsex.tokenization import MarkupTokenizer
from parsex.tree import ROOT_ID, Node, NodeStack, Query


class Document:
    """A parsed markup document.

    Owns the node stack for its whole lifetime. Queries return the stack's
    live nodes, so edits made through them (or through ``get_mutable``) show
    up in every later query and render. Only one caller should mutate a
    document at a time.
    """

    def __init__(
        self,
        stack: NodeStack,
        config: Optional[ParserConfig] = None,
        diagnostics: Optional[DiagnosticLog] = None,
        metrics: Optional[ParseMetrics] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.stack = stack
        self.config = config or ParserConfig()
        self.diagnostics = diagnostics or DiagnosticLog(correlation_id)
        self.metrics = metrics or ParseMetrics()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "document")

    # Search

    def query(self) -> Query:
        """Start a query over the whole document."""
        return self.stack.query()

    def children_of(self, node_id: int) -> Query:
        """Start a query scoped to the subtree below ``node_id``."""
        return self.stack.query(node_id)

    def traverse(
        self,
        scope_root: int = ROOT_ID,
        excludes: Iterable[int] = ()
    ) -> Iterator[Node]:
        """Walk nodes in document order, optionally scoped and with exclusions."""
        for node_id in self.stack.cursor(scope_root, excludes):
            yield self.stack.node(node_id)

    def get(self, node_id: int) -> Optional[Node]:
        """Get a detached snapshot of a node, None when unknown."""
        node = self.stack.get(node_id)
        return node.snapshot() if node is not None else None

    def get_mutable(self, node_id: int) -> Optional[Node]:
        """Get the live node, None when unknown."""
        return self.stack.get(node_id)

    def __getitem__(self, node_id: int) -> Node:
        node = self.stack.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.stack

    def __len__(self) -> int:
        return len(self.stack)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.stack)

    # Rendering

    def render(self, excludes: Iterable[int] = ()) -> str:
        """Render the whole document with edits applied."""
        return render_document(self.stack, excludes)

    def render_subtree(self, node_id: int, excludes: Iterable[int] = ()) -> str:
        """Render the contents of one node (0 for the whole document)."""
        return render_subtree(self.stack, node_id, excludes)

    def rebuild(self) -> str:
        """Pretty-print the document without comments."""
        return rebuild(self.stack, self.config.render)

    def extract_subtree(
        self,
        node_id: int,
        excludes: Iterable[int] = ()
    ) -> Optional["Document"]:
        """Copy one node and its descendants into an independent document.

        The node's markup (its own tags included, excluded subtrees left out)
        is rendered and parsed again, so ids in the new document start at 1.

        Returns:
            New Document, or None when ``node_id`` is unknown or excluded
        """
        excludes = set(excludes)
        if node_id != ROOT_ID and (
            node_id not in self.stack or node_id in excludes
        ):
            return None

        markup = render_outer(self.stack, node_id, excludes)
        self.logger.debug(
            "Extracting subtree",
            extra={"node_id": node_id, "excludes": sorted(excludes)}
        )
        result = MarkupTokenizer(self.config.tokenizer, self.correlation_id).tokenize(markup)
        return Document(
            result.stack,
            self.config,
            result.diagnostics,
            result.metrics,
            self.correlation_id,
        )

    def __str__(self) -> str:
        return self.render()

    # Reporting

    @property
    def buffer(self) -> str:
        """Placeholder buffer backing this document."""
        return self.stack.buffer

    @property
    def success(self) -> bool:
        """True unless an error diagnostic was recorded."""
        return not self.diagnostics.has_errors()

    @property
    def root_nodes(self) -> List[Node]:
        """Top-level nodes in document order."""
        return [self.stack.node(node_id) for node_id in self.stack.children_of(ROOT_ID)]

    def tag_counts(self) -> Dict[str, int]:
        """Number of nodes per tag name."""
        counts: Dict[str, int] = {}
        for node in self.stack:
            counts[node.tag] = counts.get(node.tag, 0) + 1
        return counts

    def summary(self) -> Dict[str, Any]:
        """Summary statistics for reporting."""
        diagnostics: List[DiagnosticEntry] = list(self.diagnostics)
        return {
            "success": self.success,
            "node_count": len(self),
            "tag_counts": self.tag_counts(),
            "metrics": self.metrics.to_dict(),
            "diagnostics": [entry.to_dict() for entry in diagnostics],
        }
