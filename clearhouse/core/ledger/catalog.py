"""
ItemCatalog - listed items for the current round.

Items are keyed by their content-derived identifier. Ownership is
per supplier, but the catalog indexes identifiers directly, so finding
the seller of an item is a lookup rather than a scan across suppliers.

Identical content listed by two different suppliers maps to one
identifier; the second listing is rejected instead of shadowing the
first. Re-listing by the same supplier updates the reserve price.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from clearhouse.core.errors import IdentifierCollision, ItemNotFound
from clearhouse.crypto import item_id as derive_item_id
from clearhouse.utils.logger import get_logger
from clearhouse.utils.validation import require, validate_amount, validate_content

logger = get_logger("catalog")

DEFAULT_MIN_RESERVE = 1


@dataclass
class ListedItem:
    """An item offered by a supplier."""
    content: str
    reserve_price: int

    def to_dict(self) -> dict:
        return {"content": self.content, "reserve_price": self.reserve_price}

    @classmethod
    def from_dict(cls, data: dict) -> "ListedItem":
        return cls(content=data["content"], reserve_price=int(data["reserve_price"]))


class ItemCatalog:
    """
    Items listed in the current round.

    Attributes:
        min_reserve: Floor applied to every reserve price
    """

    def __init__(self, min_reserve: int = DEFAULT_MIN_RESERVE, max_content_length: int = 4096):
        self.min_reserve = min_reserve
        self.max_content_length = max_content_length
        # item_id -> (supplier, item)
        self._index: Dict[str, Tuple[str, ListedItem]] = {}

    # =========================================================================
    # Mutation
    # =========================================================================

    def list(self, supplier: str, content: str, reserve_price: int) -> str:
        """
        Insert or update a listing under ``supplier``.

        Non-positive reserve prices are raised to ``min_reserve``.

        Returns:
            The item identifier

        Raises:
            IdentifierCollision: another supplier already lists this content
            ValueError: malformed content or reserve price
        """
        require(validate_content(content, self.max_content_length))
        if isinstance(reserve_price, bool) or not isinstance(reserve_price, int):
            raise ValueError(f"reserve_price must be int, got {type(reserve_price).__name__}")

        key = derive_item_id(content)
        existing = self._index.get(key)
        if existing is not None and existing[0] != supplier:
            raise IdentifierCollision(
                f"Item {key[:16]}... already listed by another supplier"
            )

        reserve = max(reserve_price, self.min_reserve)
        self._index[key] = (supplier, ListedItem(content=content, reserve_price=reserve))

        logger.debug(f"Listed {key[:16]}... by {supplier} with reserve {reserve}")
        return key

    def insert(self, supplier: str, key: str, item: ListedItem) -> None:
        """Place a listing under a known identifier (used when restoring state)."""
        require(validate_amount(item.reserve_price, "reserve_price"))
        self._index[key] = (supplier, item)

    def take(self, item_id: str) -> Optional[Tuple[str, ListedItem]]:
        """Remove an item and return ``(supplier, item)``, or None if not listed."""
        return self._index.pop(item_id, None)

    def withdraw(self, supplier: str, item_id: str) -> ListedItem:
        """
        Remove one of the supplier's own listings.

        Raises:
            ItemNotFound: the supplier does not list ``item_id``
        """
        if not self.contains(supplier, item_id):
            raise ItemNotFound(f"{supplier} does not list item {item_id[:16]}...")
        _, item = self._index.pop(item_id)
        logger.debug(f"Withdrew {item_id[:16]}... by {supplier}")
        return item

    def clear(self) -> None:
        self._index.clear()

    # =========================================================================
    # Queries
    # =========================================================================

    def contains(self, supplier: str, item_id: str) -> bool:
        """Whether ``supplier`` lists ``item_id``."""
        entry = self._index.get(item_id)
        return entry is not None and entry[0] == supplier

    def get(self, item_id: str) -> Optional[ListedItem]:
        entry = self._index.get(item_id)
        return entry[1] if entry else None

    def supplier_of(self, item_id: str) -> Optional[str]:
        entry = self._index.get(item_id)
        return entry[0] if entry else None

    def items_of(self, supplier: str) -> Dict[str, ListedItem]:
        """A supplier's listings, keyed by identifier."""
        return {
            key: item
            for key, (owner, item) in self._index.items()
            if owner == supplier
        }

    def suppliers(self) -> List[str]:
        return sorted({owner for owner, _ in self._index.values()})

    def entries(self) -> Iterator[Tuple[str, str, ListedItem]]:
        """Yield ``(item_id, supplier, item)`` for every listing."""
        for key, (owner, item) in self._index.items():
            yield key, owner, item

    def copy(self) -> "ItemCatalog":
        clone = ItemCatalog(self.min_reserve, self.max_content_length)
        clone._index = dict(self._index)
        return clone

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"ItemCatalog(items={len(self._index)}, suppliers={len(self.suppliers())})"
