"""
Ledgerline - Ref Resolver

Turns a snapshot ref into a Playwright locator.

Refs in the current table resolve by role + exact accessible name, which
survives re-renders that keep the element's semantics. Refs missing from
the table (stale, or never seen) go straight to Playwright's own
"aria-ref=" selector engine; if the driver no longer tracks that ref the
later interaction fails with its element-not-found error.
"""

from dataclasses import dataclass
from typing import Any, Optional

from agency.tools.browser.refs import RefTable

STRATEGY_ROLE = "role"
STRATEGY_RAW_REF = "raw_ref"


@dataclass(frozen=True)
class TargetDescriptor:
    """How to locate the element behind a ref."""
    ref: str
    strategy: str
    role: Optional[str] = None
    name: Optional[str] = None
    nth: Optional[int] = None

    @property
    def match_index(self) -> int:
        """Zero-based offset among same role/name matches (nth <= 0 means first)."""
        if self.nth is not None and self.nth > 0:
            return self.nth
        return 0

    def locate(self, page: Any) -> Any:
        """
        Build the Playwright locator for this target.

        Args:
            page: Playwright Page

        Returns:
            Locator (lazy; nothing is queried until an action runs)
        """
        if self.strategy == STRATEGY_RAW_REF:
            return page.locator(f"aria-ref={self.ref}")

        if self.name is not None:
            locator = page.get_by_role(self.role, name=self.name, exact=True)
        else:
            locator = page.get_by_role(self.role)

        if self.match_index > 0:
            return locator.nth(self.match_index)
        return locator.first

    def describe(self) -> str:
        """Short human-readable form for logs."""
        if self.strategy == STRATEGY_RAW_REF:
            return f"aria-ref={self.ref}"
        label = f'{self.role} "{self.name}"' if self.name is not None else self.role
        if self.match_index > 0:
            label += f" #{self.match_index}"
        return label


class RefResolver:
    """Resolves ref-ids against the session's current RefTable."""

    def __init__(self, ref_table: RefTable):
        self._ref_table = ref_table

    def resolve(self, ref_id: str) -> TargetDescriptor:
        """
        Resolve a ref-id to a target descriptor.

        Args:
            ref_id: Ref from a snapshot (e.g., "e12")

        Returns:
            Role-based descriptor if the ref is in the table,
            otherwise a raw-ref fallback descriptor
        """
        entry = self._ref_table.get(ref_id)
        if entry is None:
            return TargetDescriptor(ref=ref_id, strategy=STRATEGY_RAW_REF)

        return TargetDescriptor(
            ref=ref_id,
            strategy=STRATEGY_ROLE,
            role=entry.role,
            name=entry.name,
            nth=entry.nth,
        )
