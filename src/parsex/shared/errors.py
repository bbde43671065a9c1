"""Exception hierarchy for markup parsing and tree manipulation.

Tolerated structural anomalies (unmatched close tags, missing placeholders at
render time, unknown node ids supplied by callers) are never raised; they are
reported through diagnostics or empty results. The exceptions below cover
strict-mode rejections and broken internal invariants.
"""

from typing import Optional


class ParsexError(Exception):
    """Base exception for all parsex errors."""


class IntegrityError(ParsexError):
    """Raised when an internal tree invariant does not hold.

    This signals a defect in the node store (for example a recorded parent id
    with no corresponding node), never a problem with user input.
    """

    def __init__(self, message: str, node_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class UnbalancedMarkupError(ParsexError):
    """Raised in strict mode for a closing tag with no open counterpart."""

    def __init__(self, tag: str, offset: int) -> None:
        super().__init__(f"Unmatched closing tag </{tag}> at offset {offset}")
        self.tag = tag
        self.offset = offset


class DuplicateAttributeError(ParsexError):
    """Raised in strict mode when an opening tag repeats an attribute key."""

    def __init__(self, tag: str, keys: list) -> None:
        super().__init__(
            f"Duplicate attribute(s) {', '.join(keys)} on <{tag}>"
        )
        self.tag = tag
        self.keys = list(keys)
