"""
Ledgerline - Snapshot Ref Table

A ref ("e" + digits) names one node of the most recent accessibility
snapshot. The table maps each ref to the role/name/nth needed to find the
element again with a role locator.

The table is replaced wholesale by every snapshot capture and cleared on
session teardown. Nothing else mutates it.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional

REF_ID_PATTERN = re.compile(r"^e\d+$")


@dataclass(frozen=True)
class RefEntry:
    """One referenceable node surfaced in a snapshot."""
    role: str
    name: Optional[str] = None
    nth: Optional[int] = None  # None = no [nth=] marker; 0 is an explicit marker

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; absent fields are omitted."""
        data: Dict[str, Any] = {"role": self.role}
        if self.name is not None:
            data["name"] = self.name
        if self.nth is not None:
            data["nth"] = self.nth
        return data


class RefTable:
    """Mapping of ref-id to RefEntry from the latest snapshot."""

    def __init__(self):
        self._entries: Dict[str, RefEntry] = {}

    def replace(self, entries: Mapping[str, RefEntry]) -> None:
        """
        Discard the current table and install a freshly parsed one.

        Args:
            entries: Parsed ref entries keyed by ref-id

        Raises:
            ValueError: If any key is not a valid ref-id
        """
        for ref_id in entries:
            if not REF_ID_PATTERN.match(ref_id):
                raise ValueError(f"Invalid ref id: {ref_id!r}")
        self._entries = dict(entries)

    def clear(self) -> None:
        """Forget all refs (session teardown)."""
        self._entries = {}

    def get(self, ref_id: str) -> Optional[RefEntry]:
        return self._entries.get(ref_id)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialize the table for the snapshot result."""
        return {ref_id: entry.to_dict() for ref_id, entry in self._entries.items()}

    def __contains__(self, ref_id: object) -> bool:
        return ref_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
