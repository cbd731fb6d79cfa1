"""
HoldLedger - per-bidder running total of committed money.

Each accepted bid adds its full amount to the bidder's hold. Being
outbid does not shrink it; the difference is refunded at clearing.
"""

from typing import Dict, Iterator, Tuple

from clearhouse.core.errors import ArithmeticUnderflow
from clearhouse.utils.validation import require, validate_amount


class HoldLedger:
    """Running totals of money each bidder has committed this round."""

    def __init__(self):
        self._holds: Dict[str, int] = {}

    def add(self, bidder: str, amount: int) -> int:
        """Add to a bidder's hold and return the new total."""
        require(validate_amount(amount))
        total = self._holds.get(bidder, 0) + amount
        require(validate_amount(total, "hold"))
        self._holds[bidder] = total
        return total

    def release(self, bidder: str, amount: int) -> int:
        """
        Subtract from a bidder's hold and return what is left.

        Raises:
            ArithmeticUnderflow: ``amount`` exceeds the hold
        """
        require(validate_amount(amount))
        held = self._holds.get(bidder, 0)
        if amount > held:
            raise ArithmeticUnderflow(
                f"Can not release {amount} from {bidder}: only {held} held"
            )
        self._holds[bidder] = held - amount
        return held - amount

    def get(self, bidder: str) -> int:
        return self._holds.get(bidder, 0)

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(list(self._holds.items()))

    def total(self) -> int:
        return sum(self._holds.values())

    def copy(self) -> "HoldLedger":
        clone = HoldLedger()
        clone._holds = dict(self._holds)
        return clone

    def clear(self) -> None:
        self._holds.clear()

    def __len__(self) -> int:
        return len(self._holds)
