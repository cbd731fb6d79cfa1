"""
WinningsStore - items awarded to each account, across all rounds.

Append-only: clearing a round never removes history.
"""

from typing import Dict, List


class WinningsStore:
    """Per-winner ordered list of awarded item contents."""

    def __init__(self):
        self._won: Dict[str, List[str]] = {}

    def award(self, winner: str, content: str) -> int:
        """Append an item to a winner's history and return its new length."""
        self._won.setdefault(winner, []).append(content)
        return len(self._won[winner])

    def get(self, account: str) -> List[str]:
        return list(self._won.get(account, []))

    def as_dict(self) -> Dict[str, List[str]]:
        return {account: list(items) for account, items in self._won.items()}

    def total(self) -> int:
        """Number of items awarded overall."""
        return sum(len(items) for items in self._won.values())

    def __len__(self) -> int:
        return len(self._won)
