"""Caveat ledger: the run-scoped record of recoverable divergences.

A caveat is recorded whenever a step finds a remote resource already in
place and reuses it instead of creating it. The driver creates one ledger per
process run and passes it to every job, so the final report shows every
divergence across all jobs in recording order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class CaveatLedger:
    """Append-only list of caveats.

    Duplicates are kept: reusing the same kind of resource in two jobs
    produces two entries.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    def add(self, caveat: str) -> None:
        """Record a caveat."""
        logger.debug(f"Caveat recorded: {caveat}")
        self._entries.append(caveat)

    def exists(self, caveat: str) -> bool:
        """Check if a caveat of this kind was ever recorded."""
        return caveat in self._entries

    def count(self, caveat: str) -> int:
        """Count how many times a caveat was recorded."""
        return self._entries.count(caveat)

    def list(self) -> list[str]:
        """Return all caveats in recording order (a copy)."""
        return self._entries.copy()

    def handle(self) -> CaveatHandle:
        """Build the add/exists view handed to steps."""
        return CaveatHandle(self)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        # An empty ledger is still a ledger
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries.copy())

    def __repr__(self) -> str:
        return f"CaveatLedger({self._entries!r})"


@dataclass(frozen=True)
class CaveatHandle:
    """Step-facing view of a ledger: record and query, nothing else."""

    ledger: CaveatLedger

    def add(self, caveat: str) -> None:
        self.ledger.add(caveat)

    def exists(self, caveat: str) -> bool:
        return self.ledger.exists(caveat)
