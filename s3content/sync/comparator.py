"""Key mapping comparison for reconciliation passes."""

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass
class DiffResult:
    """Partition of two key mappings into added, removed and unchanged entries.

    Each field maps an identifier (a local path) to its store key. No
    (identifier, key) entry appears in more than one of the three mappings.
    """

    added: dict[str, str] = field(default_factory=dict)
    """Present in the current mapping only"""

    removed: dict[str, str] = field(default_factory=dict)
    """Present in the previous mapping only"""

    unchanged: dict[str, str] = field(default_factory=dict)
    """Present in both mappings with the same key"""

    @property
    def is_empty(self) -> bool:
        """True when no store calls are needed."""
        return not self.added and not self.removed

    def to_dict(self) -> dict:
        """Convert the diff to a dictionary for JSON output."""
        return {
            "added": sorted(self.added.values()),
            "removed": sorted(self.removed.values()),
            "unchanged": len(self.unchanged),
        }


def diff_mappings(
    previous: Mapping[str, str], current: Mapping[str, str]
) -> DiffResult:
    """Compare a previously recorded key mapping against a current one.

    An identifier whose store key changed between the two mappings is
    recorded as removed with its old key and as added with its new key.

    Args:
        previous: Mapping recorded by the last reconciliation
        current: Freshly enumerated mapping

    Returns:
        DiffResult with added, removed and unchanged entries

    Examples:
        >>> diff = diff_mappings({"/r/a.html": "a.html", "/r/b.css": "b.css"},
        ...                      {"/r/a.html": "a.html", "/r/c.js": "c.js"})
        >>> diff.to_dict()
        {'added': ['c.js'], 'removed': ['b.css'], 'unchanged': 1}
    """
    result = DiffResult()

    for identifier, key in current.items():
        old_key = previous.get(identifier)
        if old_key is None:
            result.added[identifier] = key
        elif old_key == key:
            result.unchanged[identifier] = key
        else:
            result.added[identifier] = key

    for identifier, key in previous.items():
        new_key = current.get(identifier)
        if new_key is None or new_key != key:
            result.removed[identifier] = key

    return result
