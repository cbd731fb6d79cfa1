"""Per-round ledgers and the persistent winnings history"""
from clearhouse.core.ledger.catalog import ItemCatalog, ListedItem, DEFAULT_MIN_RESERVE
from clearhouse.core.ledger.bids import Bid, BidLedger, ItemState
from clearhouse.core.ledger.holds import HoldLedger
from clearhouse.core.ledger.winnings import WinningsStore

__all__ = [
    "ItemCatalog",
    "ListedItem",
    "DEFAULT_MIN_RESERVE",
    "Bid",
    "BidLedger",
    "ItemState",
    "HoldLedger",
    "WinningsStore",
]
