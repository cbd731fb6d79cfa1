"""
BidLedger - the single current bid per item identifier.

A new bid must strictly exceed the one it replaces. The replaced
bidder's hold is not touched here; holds are reconciled at clearing.
The ledger also remembers which identifiers each bidder bid on in the
round, so clearing can report who won and who lost.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, Optional, Tuple

from clearhouse.core.errors import BidTooLow, SelfDealing
from clearhouse.utils.logger import get_logger
from clearhouse.utils.validation import require, validate_amount

logger = get_logger("bids")


class ItemState(IntEnum):
    """A bidder's standing on an item."""
    MADE_BID = 0
    WON = 1
    LOST = 2


@dataclass(frozen=True)
class Bid:
    """Current best bid on an item."""
    bidder: str
    amount: int

    def to_dict(self) -> dict:
        return {"bidder": self.bidder, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(bidder=data["bidder"], amount=int(data["amount"]))


class BidLedger:
    """One bid slot per item identifier, visible across all suppliers."""

    def __init__(self):
        self._slots: Dict[str, Bid] = {}
        # bidder -> item_ids bid on this round (insertion ordered)
        self._interests: Dict[str, Dict[str, ItemState]] = {}

    def check(self, item_id: str, bidder: str, amount: int, supplier: Optional[str] = None) -> None:
        """
        Validate a bid without recording it.

        Args:
            item_id: Target identifier
            bidder: Account placing the bid
            amount: Offered amount
            supplier: Supplier currently listing ``item_id``, if any

        Raises:
            SelfDealing: bidder is the supplier of the item
            BidTooLow: amount does not exceed the current bid
        """
        require(validate_amount(amount))

        if supplier is not None and supplier == bidder:
            raise SelfDealing("Supplier can not bid on their own item")

        current = self._slots.get(item_id)
        if current is not None and amount <= current.amount:
            raise BidTooLow(
                f"A bid of {current.amount} already exists for {item_id[:16]}..., got {amount}"
            )

    def place(self, item_id: str, bidder: str, amount: int, supplier: Optional[str] = None) -> Optional[Bid]:
        """
        Record a bid, overwriting the slot.

        Returns:
            The bid that was replaced, if any
        """
        self.check(item_id, bidder, amount, supplier)

        previous = self._slots.get(item_id)
        self._slots[item_id] = Bid(bidder=bidder, amount=amount)
        self._interests.setdefault(bidder, {})[item_id] = ItemState.MADE_BID

        if previous is not None:
            logger.debug(f"{bidder} outbid {previous.bidder} on {item_id[:16]}...: {previous.amount} -> {amount}")
        else:
            logger.debug(f"{bidder} opened {item_id[:16]}... at {amount}")
        return previous

    def restore(self, item_id: str, bid: Bid) -> None:
        self._slots[item_id] = bid

    def restore_interest(self, bidder: str, item_id: str) -> None:
        self._interests.setdefault(bidder, {})[item_id] = ItemState.MADE_BID

    def clear(self) -> None:
        self._slots.clear()
        self._interests.clear()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, item_id: str) -> Optional[Bid]:
        return self._slots.get(item_id)

    def items(self) -> Iterator[Tuple[str, Bid]]:
        return iter(list(self._slots.items()))

    def interests(self) -> Dict[str, Dict[str, ItemState]]:
        return {bidder: dict(items) for bidder, items in self._interests.items()}

    def interests_of(self, bidder: str) -> Dict[str, ItemState]:
        return dict(self._interests.get(bidder, {}))

    def total(self) -> int:
        """Sum of all currently recorded bids."""
        return sum(bid.amount for bid in self._slots.values())

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._slots

    def __len__(self) -> int:
        return len(self._slots)
