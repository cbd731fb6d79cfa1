import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from clearhouse.core.ledger import Bid, ListedItem
from clearhouse.core.storage.sqlite_adapter import SQLiteAdapter
from clearhouse.utils.logger import get_logger

logger = get_logger("storage.manager")

BUCKET_CATALOG = "catalog"
BUCKET_BIDS = "bids"
BUCKET_INTERESTS = "interests"
BUCKET_HOLDS = "holds"
BUCKET_WINNINGS = "winnings"

META_ROUND_OPEN = "round_open"
META_ROUND_NUMBER = "round_number"

# Separates the two halves of a composite key; account names never contain it
KEY_SEPARATOR = b"\x00"


@dataclass
class AuctionSnapshot:
    """Complete auction state as plain data."""
    round_open: bool = False
    round_number: int = 0
    catalog: Dict[str, Tuple[str, ListedItem]] = field(default_factory=dict)
    bids: Dict[str, Bid] = field(default_factory=dict)
    interests: Dict[str, List[str]] = field(default_factory=dict)
    holds: Dict[str, int] = field(default_factory=dict)
    winnings: Dict[str, List[str]] = field(default_factory=dict)


def _encode(value) -> bytes:
    return json.dumps(value, sort_keys=True).encode("utf-8")


def _decode(data: bytes):
    return json.loads(data.decode("utf-8"))


class StorageManager:
    """
    Manages persistent storage for an auction.

    Coordinates data persistence using SQLite adapter. Every save
    rewrites the auction's buckets in a single transaction, so a reader
    never observes half of a call's changes.
    """

    def __init__(self, data_dir: Path, db_name: str = "auction.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.info(f"StorageManager initialized at {self.db_path}")

    def has_state(self) -> bool:
        return self.adapter.get_meta(META_ROUND_NUMBER) is not None

    def save_state(self, snapshot: AuctionSnapshot):
        """Atomically persist a full snapshot."""
        catalog = [
            (key.encode(), _encode({"supplier": supplier, **item.to_dict()}))
            for key, (supplier, item) in snapshot.catalog.items()
        ]
        bids = [(key.encode(), _encode(bid.to_dict())) for key, bid in snapshot.bids.items()]
        interests = [
            (bidder.encode() + KEY_SEPARATOR + key.encode(), b"")
            for bidder, keys in snapshot.interests.items()
            for key in keys
        ]
        holds = [(bidder.encode(), _encode(amount)) for bidder, amount in snapshot.holds.items()]
        winnings = [(account.encode(), _encode(items)) for account, items in snapshot.winnings.items()]

        self.adapter.replace_buckets(
            {
                BUCKET_CATALOG: catalog,
                BUCKET_BIDS: bids,
                BUCKET_INTERESTS: interests,
                BUCKET_HOLDS: holds,
                BUCKET_WINNINGS: winnings,
            },
            meta={
                META_ROUND_OPEN: "1" if snapshot.round_open else "0",
                META_ROUND_NUMBER: str(snapshot.round_number),
            },
        )

    def load_state(self) -> AuctionSnapshot:
        """Load the last saved snapshot (empty if nothing was saved)."""
        snapshot = AuctionSnapshot()
        if not self.has_state():
            return snapshot

        snapshot.round_open = self.adapter.get_meta(META_ROUND_OPEN) == "1"
        snapshot.round_number = int(self.adapter.get_meta(META_ROUND_NUMBER))

        for key, value in self.adapter.items(BUCKET_CATALOG):
            data = _decode(value)
            snapshot.catalog[key.decode()] = (data["supplier"], ListedItem.from_dict(data))

        for key, value in self.adapter.items(BUCKET_BIDS):
            snapshot.bids[key.decode()] = Bid.from_dict(_decode(value))

        for key, _ in self.adapter.items(BUCKET_INTERESTS):
            bidder, item_key = key.split(KEY_SEPARATOR, 1)
            snapshot.interests.setdefault(bidder.decode(), []).append(item_key.decode())

        for key, value in self.adapter.items(BUCKET_HOLDS):
            snapshot.holds[key.decode()] = int(_decode(value))

        for key, value in self.adapter.items(BUCKET_WINNINGS):
            snapshot.winnings[key.decode()] = list(_decode(value))

        return snapshot

    def close(self):
        self.adapter.close()
