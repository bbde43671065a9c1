"""Attribute-string parsing for opening tags.

Splits the text after a tag name into ``key=value`` pairs and the leftover
fragment (bare boolean attributes and anything that does not match a pair).
Parsing is total: malformed fragments never raise, they end up in the
leftover text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

# key=value where value is double-quoted, single-quoted, or runs to whitespace
ATTRIBUTE_PATTERN = re.compile(
    r"""([A-Za-z0-9_:.\-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))"""
)


@dataclass
class AttributeScan:
    """Detailed result of scanning an attribute string."""

    attributes: Dict[str, str] = field(default_factory=dict)
    extra: str = ""
    duplicates: List[str] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        """Check whether any key was assigned more than once."""
        return len(self.duplicates) > 0


def scan_attributes(attr_string: str) -> AttributeScan:
    """Scan an attribute string, recording duplicate keys.

    Args:
        attr_string: Text following the tag name inside an opening tag

    Returns:
        AttributeScan with the key/value mapping (last write wins), the
        leftover text and the list of keys that were repeated
    """
    scan = AttributeScan()
    if not attr_string:
        return scan

    leftover: List[str] = []
    last_end = 0
    for match in ATTRIBUTE_PATTERN.finditer(attr_string):
        leftover.append(attr_string[last_end:match.start()])
        last_end = match.end()

        key = match.group(1).strip().strip("\"'")
        value = next(
            (group for group in match.groups()[1:] if group is not None), ""
        )
        value = value.strip()
        if key in scan.attributes and key not in scan.duplicates:
            scan.duplicates.append(key)
        scan.attributes[key] = value
    leftover.append(attr_string[last_end:])

    scan.extra = " ".join("".join(leftover).split())
    return scan


def parse_attributes(attr_string: str) -> Tuple[Dict[str, str], str]:
    """Parse an attribute string into a mapping and leftover text.

    Args:
        attr_string: Text following the tag name inside an opening tag

    Returns:
        Tuple of (attributes, extra)

    Examples:
        >>> parse_attributes('id="main" class=\\'a b\\' hidden')
        ({'id': 'main', 'class': 'a b'}, 'hidden')
    """
    scan = scan_attributes(attr_string)
    return scan.attributes, scan.extra
