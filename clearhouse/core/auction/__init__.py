"""
Clearhouse Auction Module.

- Round lifecycle and bid/listing validation (AuctionHouse)
- Clearing plan computation and settlement
- Request validation and dispatch
"""

from clearhouse.core.auction.clearing import (
    Award,
    ClearingPlan,
    compute_clearing,
    REASON_PAYOUT,
    REASON_UNSOLD,
    REASON_LEFTOVER,
)
from clearhouse.core.auction.house import AuctionHouse
from clearhouse.core.auction.requests import (
    ClearRoundRequest,
    ListItemRequest,
    PlaceBidRequest,
    StartRoundRequest,
    WithdrawItemRequest,
    dispatch,
    parse_request,
)

__all__ = [
    "Award",
    "ClearingPlan",
    "compute_clearing",
    "REASON_PAYOUT",
    "REASON_UNSOLD",
    "REASON_LEFTOVER",
    "AuctionHouse",
    "StartRoundRequest",
    "ClearRoundRequest",
    "ListItemRequest",
    "PlaceBidRequest",
    "WithdrawItemRequest",
    "dispatch",
    "parse_request",
]
