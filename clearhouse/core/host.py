"""
Host - capabilities the surrounding environment provides to the auction.

The auction never resolves identities or moves money itself. It asks
the host who the in-flight caller is, how much they attached to the
call, and hands it transfer instructions once its own state is final.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from clearhouse.utils.logger import get_logger
from clearhouse.utils.validation import require, validate_account, validate_amount

logger = get_logger("host")


@dataclass(frozen=True)
class Transfer:
    """A native value transfer instruction."""
    account: str
    amount: int
    reason: str = ""


class Host(ABC):
    """Capabilities consumed by the auction controller."""

    @abstractmethod
    def current_caller(self) -> str:
        """Authenticated party for the in-flight call."""

    @abstractmethod
    def attached_amount(self) -> int:
        """Amount the caller committed to the in-flight call."""

    @abstractmethod
    def schedule_transfer(self, account: str, amount: int, reason: str = "") -> None:
        """Queue a transfer. Fire-and-forget: the outcome is not reported back."""


@dataclass
class _CallFrame:
    caller: str
    deposit: int


class LocalHost(Host):
    """
    In-process host used by the CLI and the tests.

    Scheduled transfers are executed immediately into an in-memory
    balance book and kept in ``transfers`` for inspection.
    """

    def __init__(self):
        self._frame: Optional[_CallFrame] = None
        self.transfers: List[Transfer] = []
        self.balances: Dict[str, int] = defaultdict(int)

    @contextmanager
    def call(self, caller: str, deposit: int = 0) -> Iterator["LocalHost"]:
        """
        Run a block of operations as ``caller`` with ``deposit`` attached.

        Calls do not nest; each call runs to completion before the next.
        """
        require(validate_account(caller))
        require(validate_amount(deposit, "deposit"))
        if self._frame is not None:
            raise RuntimeError(f"call by {self._frame.caller} still in flight")

        self._frame = _CallFrame(caller=caller, deposit=deposit)
        try:
            yield self
        finally:
            self._frame = None

    def current_caller(self) -> str:
        if self._frame is None:
            raise RuntimeError("No call in flight")
        return self._frame.caller

    def attached_amount(self) -> int:
        if self._frame is None:
            raise RuntimeError("No call in flight")
        return self._frame.deposit

    def schedule_transfer(self, account: str, amount: int, reason: str = "") -> None:
        transfer = Transfer(account=account, amount=amount, reason=reason)
        self.transfers.append(transfer)
        self.balances[account] += amount
        logger.debug(f"Transfer {amount} -> {account} ({reason or 'unspecified'})")

    # =========================================================================
    # Inspection
    # =========================================================================

    def paid_to(self, account: str) -> int:
        """Total amount transferred to an account so far."""
        return self.balances.get(account, 0)

    def total_transferred(self) -> int:
        return sum(t.amount for t in self.transfers)

    def drain(self) -> List[Transfer]:
        """Return and forget the recorded transfer log."""
        transfers, self.transfers = self.transfers, []
        return transfers
