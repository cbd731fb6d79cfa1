"""
Persistent Storage Module.

Provides SQLite-backed persistence for:
- Per-round ledgers (catalog, bids, holds)
- Winnings history
- Round metadata
"""

from clearhouse.core.storage.sqlite_adapter import SQLiteAdapter
from clearhouse.core.storage.storage_manager import AuctionSnapshot, StorageManager

__all__ = ["SQLiteAdapter", "StorageManager", "AuctionSnapshot"]
