"""
Clearing Engine - settle every outstanding bid at the end of a round.

Conceptual Background:
---------------------
During a round each item keeps only its latest (highest) bid, while each
bidder's hold grows by every bid they place, including bids that were
later overtaken. Clearing reconciles the two:

1. **Winners**: whoever holds an item's bid slot wins it. No comparison
   happens here; the bid ledger only accepts strictly increasing bids.
2. **Release**: each winning amount is released from the winner's hold.
   Whatever remains in a hold afterwards is money committed to bids the
   bidder did not win.
3. **Exchange**: each won item is taken from the catalog; its supplier is
   paid the winning amount and the content goes to the winner. If the
   item is gone (withdrawn, or never listed), the bid no longer meets the
   reserve, or the winner is the item's own supplier, the winning amount
   goes back to the bidder instead.
4. **Leftovers**: every remaining hold is refunded.

Planning is pure. ``compute_clearing`` works on copies and returns the
complete set of awards and transfers, so a failure leaves the round
untouched and no transfer is issued for a half-cleared round.

Conservation:
------------
    sum(payouts) + sum(refunds) == sum(holds before clearing)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List

from clearhouse.core.host import Transfer
from clearhouse.core.ledger import BidLedger, HoldLedger, ItemCatalog, ItemState
from clearhouse.utils.logger import get_logger

logger = get_logger("clearing")

REASON_PAYOUT = "payout"
REASON_UNSOLD = "unsold"
REASON_LEFTOVER = "leftover"


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class Award:
    """An item handed to its winner."""
    item_id: str
    winner: str
    supplier: str
    content: str
    amount: int


@dataclass
class ClearingPlan:
    """
    Everything a round's clearing will do.

    Attributes:
        awards: Items sold, in bid-ledger order
        payouts: Transfers to suppliers
        refunds: Transfers back to bidders (unsold items, then leftovers)
        outcomes: bidder -> {item_id: WON | LOST}
        total_held: Sum of holds before clearing
    """
    awards: List[Award] = field(default_factory=list)
    payouts: List[Transfer] = field(default_factory=list)
    refunds: List[Transfer] = field(default_factory=list)
    outcomes: Dict[str, Dict[str, ItemState]] = field(default_factory=dict)
    total_held: int = 0
    round_number: int = 0

    @property
    def transfers(self) -> List[Transfer]:
        """Payouts first, then refunds."""
        return self.payouts + self.refunds

    @property
    def total_transferred(self) -> int:
        return sum(t.amount for t in self.transfers)

    def winners(self) -> Dict[str, List[str]]:
        """winner -> item contents awarded in this round."""
        won: Dict[str, List[str]] = defaultdict(list)
        for award in self.awards:
            won[award.winner].append(award.content)
        return dict(won)

    def to_dict(self) -> dict:
        return {
            "round": self.round_number,
            "awards": [
                {
                    "item_id": a.item_id,
                    "winner": a.winner,
                    "supplier": a.supplier,
                    "content": a.content,
                    "amount": a.amount,
                }
                for a in self.awards
            ],
            "transfers": [
                {"account": t.account, "amount": t.amount, "reason": t.reason}
                for t in self.transfers
            ],
            "outcomes": {
                bidder: {key: state.name for key, state in items.items()}
                for bidder, items in self.outcomes.items()
            },
            "total_held": self.total_held,
            "total_transferred": self.total_transferred,
        }


# =============================================================================
# Planning
# =============================================================================


def compute_clearing(
    catalog: ItemCatalog,
    bids: BidLedger,
    holds: HoldLedger,
) -> ClearingPlan:
    """
    Plan the settlement of a round without mutating any ledger.

    Args:
        catalog: Items listed this round
        bids: Current bid per item
        holds: Committed totals per bidder

    Returns:
        ClearingPlan

    Raises:
        ArithmeticUnderflow: a winning bid exceeds its bidder's hold
    """
    catalog = catalog.copy()
    holds = holds.copy()

    plan = ClearingPlan(total_held=holds.total())
    winners = list(bids.items())

    # Each winning amount leaves the hold here and is paid out exactly once below
    for item_id, bid in winners:
        rest = holds.release(bid.bidder, bid.amount)
        logger.debug(f"{bid.bidder} keeps {rest} after winning slot {item_id[:16]}...")

    won_keys = set()
    for item_id, bid in winners:
        listed = catalog.get(item_id)
        supplier = catalog.supplier_of(item_id)

        if (
            listed is not None
            and bid.amount >= listed.reserve_price
            and supplier != bid.bidder
        ):
            supplier, item = catalog.take(item_id)
            plan.awards.append(Award(
                item_id=item_id,
                winner=bid.bidder,
                supplier=supplier,
                content=item.content,
                amount=bid.amount,
            ))
            plan.payouts.append(Transfer(supplier, bid.amount, REASON_PAYOUT))
            won_keys.add((bid.bidder, item_id))
            continue

        # Nothing to hand over, or the bidder lists it: the winning amount goes back
        plan.refunds.append(Transfer(bid.bidder, bid.amount, REASON_UNSOLD))
        logger.warning(f"Item {item_id[:16]}... not sold, refunding {bid.amount} to {bid.bidder}")

    for bidder, leftover in holds.items():
        if leftover > 0:
            plan.refunds.append(Transfer(bidder, leftover, REASON_LEFTOVER))

    for bidder, items in bids.interests().items():
        plan.outcomes[bidder] = {
            key: ItemState.WON if (bidder, key) in won_keys else ItemState.LOST
            for key in items
        }

    return plan
