"""
AuctionHouse - round lifecycle, listings, bids and clearing.

State machine:
    CLOSED --start_round--> OPEN --clear_round--> CLOSED

Listing, bidding and withdrawal are only accepted while a round is
open. Every operation validates first and mutates second, so a raised
AuctionError leaves the ledgers as they were. Transfers are handed to
the host only after the state change has been applied and persisted.
"""

from typing import Dict, List, Optional

from clearhouse.core.auction.clearing import ClearingPlan, compute_clearing
from clearhouse.core.config import ClearingConfig
from clearhouse.core.errors import (
    BidTooLow,
    ItemNotFound,
    RoundAlreadyOpen,
    RoundClosed,
    SelfDealing,
)
from clearhouse.core.host import Host
from clearhouse.core.ledger import (
    Bid,
    BidLedger,
    HoldLedger,
    ItemCatalog,
    ItemState,
    ListedItem,
    WinningsStore,
)
from clearhouse.core.storage.storage_manager import AuctionSnapshot, StorageManager
from clearhouse.crypto import item_id as derive_item_id
from clearhouse.crypto import normalize_item_id
from clearhouse.utils.logger import get_logger
from clearhouse.utils.validation import require, validate_amount, validate_content

logger = get_logger("house")


class AuctionHouse:
    """
    A deployed auction: its ledgers, its winnings history and its round state.

    Attributes:
        catalog: Items listed this round
        bids: Current bid per item
        holds: Committed totals per bidder
        winnings: Awarded items per account, across rounds
        round_open: Whether listings and bids are accepted
        round_number: Rounds started so far
    """

    def __init__(
        self,
        host: Host,
        config: Optional[ClearingConfig] = None,
        storage_manager: Optional[StorageManager] = None,
    ):
        self.host = host
        self.config = config or ClearingConfig()
        self.storage_manager = storage_manager

        self.catalog = ItemCatalog(self.config.min_reserve, self.config.max_content_length)
        self.bids = BidLedger()
        self.holds = HoldLedger()
        self.winnings = WinningsStore()

        self.round_open = False
        self.round_number = 0
        self.last_clearing: Optional[ClearingPlan] = None

        if storage_manager and storage_manager.has_state():
            self._load_from_storage()
        elif self.config.start_open:
            self.round_open = True
            self.round_number = 1

    # =========================================================================
    # Round Lifecycle
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self.round_open

    def start_round(self) -> int:
        """
        Open a new round.

        Returns:
            The new round number

        Raises:
            RoundAlreadyOpen: a round is already open
        """
        if self.round_open:
            raise RoundAlreadyOpen("Auction is already opened")

        self.round_open = True
        self.round_number += 1
        self._commit()

        logger.info(f"Round {self.round_number} opened")
        return self.round_number

    def clear_round(self) -> ClearingPlan:
        """
        Settle every outstanding bid and reset the round.

        Winners receive their items, suppliers receive the winning amounts
        and every other committed amount is refunded. Winnings persist;
        catalog, bids and holds are emptied.

        Returns:
            The executed ClearingPlan

        Raises:
            RoundClosed: no round is open
            ArithmeticUnderflow: a hold is smaller than its winning bid;
                nothing is changed and the round stays open
        """
        self._require_open("Auction has already been finished")

        plan = compute_clearing(self.catalog, self.bids, self.holds)
        plan.round_number = self.round_number

        self.round_open = False
        for award in plan.awards:
            self.winnings.award(award.winner, award.content)
        self._reset_round()
        self._commit()

        for transfer in plan.transfers:
            self.host.schedule_transfer(transfer.account, transfer.amount, transfer.reason)

        self.last_clearing = plan
        logger.info(
            f"Round {plan.round_number} cleared: {len(plan.awards)} sold, "
            f"{len(plan.payouts)} payouts, {len(plan.refunds)} refunds, "
            f"{plan.total_transferred} transferred"
        )
        return plan

    # Name used by hosts that drive the original contract interface
    produce_round = clear_round

    # =========================================================================
    # Listings
    # =========================================================================

    def list_item(self, content: str, reserve_price: int = 0) -> str:
        """
        List an item for the caller.

        Args:
            content: Item content; its hash becomes the item identifier
            reserve_price: Minimum acceptable bid, raised to the configured floor

        Returns:
            The item identifier

        Raises:
            RoundClosed: no round is open
            SelfDealing: the caller holds the current bid on this content
            IdentifierCollision: another supplier lists the same content
        """
        self._require_open("Auction is closed. Try again later")
        supplier = self.host.current_caller()
        require(validate_content(content, self.config.max_content_length))

        current = self.bids.get(derive_item_id(content))
        if current is not None and current.bidder == supplier:
            raise SelfDealing("Supplier can not list an item they hold the bid for")

        logger.debug(f"{supplier} wants to list {content!r} with reserve {reserve_price}")
        key = self.catalog.list(supplier, content, reserve_price)
        self._commit()

        logger.info(f"Item {key[:16]}... listed by {supplier}")
        return key

    def withdraw_item(self, item_id: str) -> ListedItem:
        """
        Remove one of the caller's listings. A bid on it is refunded at clearing.

        Raises:
            RoundClosed: no round is open
            ItemNotFound: the caller does not list ``item_id``
        """
        self._require_open("Auction is closed. Try again later")
        key = normalize_item_id(item_id)
        supplier = self.host.current_caller()

        item = self.catalog.withdraw(supplier, key)
        self._commit()

        logger.info(f"Item {key[:16]}... withdrawn by {supplier}")
        return item

    # =========================================================================
    # Bidding
    # =========================================================================

    def place_bid(self, item_id: str) -> Bid:
        """
        Bid the caller's attached amount on an item.

        Validation order: round open, not the caller's own item, at least
        the reserve, strictly above the current bid.

        Returns:
            The recorded bid

        Raises:
            RoundClosed, SelfDealing, BidTooLow
        """
        self._require_open("Auction is closed. Try again later")
        key = normalize_item_id(item_id)
        bidder = self.host.current_caller()
        amount = self.host.attached_amount()

        if self.catalog.contains(bidder, key):
            raise SelfDealing("Supplier can not make bid for their own items")

        listed = self.catalog.get(key)
        minimum = listed.reserve_price if listed else self.config.min_reserve
        if amount < minimum:
            raise BidTooLow(f"Bid {amount} is below the reserve price {minimum}")

        supplier = self.catalog.supplier_of(key)
        self.bids.check(key, bidder, amount, supplier=supplier)
        require(validate_amount(self.holds.get(bidder) + amount, "hold"))

        self.bids.place(key, bidder, amount, supplier=supplier)
        total = self.holds.add(bidder, amount)
        self._commit()

        logger.debug(f"{bidder} bid {amount} on {key[:16]}..., holding {total}")
        return self.bids.get(key)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_items(self) -> List[str]:
        """Items the caller has won, oldest first."""
        return self.winnings.get(self.host.current_caller())

    def winnings_of(self, account: str) -> List[str]:
        return self.winnings.get(account)

    def all_winnings(self) -> Dict[str, List[str]]:
        return self.winnings.as_dict()

    def get_bids(self) -> Dict[str, Bid]:
        return dict(self.bids.items())

    def bid_states(self, bidder: str) -> Dict[str, ItemState]:
        """Items the bidder bid on this round."""
        return self.bids.interests_of(bidder)

    def hold_of(self, account: str) -> int:
        return self.holds.get(account)

    def listing(self, item_id: str) -> ListedItem:
        key = normalize_item_id(item_id)
        item = self.catalog.get(key)
        if item is None:
            raise ItemNotFound(f"Item {key[:16]}... is not listed")
        return item

    def stats(self) -> dict:
        """Get auction statistics."""
        return {
            "round_open": self.round_open,
            "round_number": self.round_number,
            "items_listed": len(self.catalog),
            "suppliers": len(self.catalog.suppliers()),
            "bids": len(self.bids),
            "bidders": len(self.holds),
            "total_held": self.holds.total(),
            "winners": len(self.winnings),
            "items_awarded": self.winnings.total(),
        }

    def __repr__(self) -> str:
        state = "open" if self.round_open else "closed"
        return f"AuctionHouse(round={self.round_number}, {state}, items={len(self.catalog)}, bids={len(self.bids)})"

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_open(self, message: str) -> None:
        if not self.round_open:
            raise RoundClosed(message)

    def _reset_round(self) -> None:
        self.catalog.clear()
        self.bids.clear()
        self.holds.clear()

    def snapshot(self) -> AuctionSnapshot:
        """Current state as plain data."""
        return AuctionSnapshot(
            round_open=self.round_open,
            round_number=self.round_number,
            catalog={key: (supplier, item) for key, supplier, item in self.catalog.entries()},
            bids=dict(self.bids.items()),
            interests={bidder: list(items) for bidder, items in self.bids.interests().items()},
            holds=dict(self.holds.items()),
            winnings=self.winnings.as_dict(),
        )

    def _restore(self, snapshot: AuctionSnapshot) -> None:
        self.catalog.clear()
        self.bids.clear()
        self.holds.clear()
        self.winnings = WinningsStore()

        self.round_open = snapshot.round_open
        self.round_number = snapshot.round_number
        for key, (supplier, item) in snapshot.catalog.items():
            self.catalog.insert(supplier, key, item)
        for key, bid in snapshot.bids.items():
            self.bids.restore(key, bid)
        for bidder, keys in snapshot.interests.items():
            for key in keys:
                self.bids.restore_interest(bidder, key)
        for bidder, amount in snapshot.holds.items():
            self.holds.add(bidder, amount)
        for account, items in snapshot.winnings.items():
            for content in items:
                self.winnings.award(account, content)

    def _load_from_storage(self) -> None:
        self._restore(self.storage_manager.load_state())
        logger.info(
            f"Loaded auction: round {self.round_number} "
            f"({'open' if self.round_open else 'closed'}), "
            f"{len(self.catalog)} items, {len(self.bids)} bids"
        )

    def _commit(self) -> None:
        """Persist the current state; on failure fall back to the stored one."""
        if not self.storage_manager:
            return
        try:
            self.storage_manager.save_state(self.snapshot())
        except Exception:
            logger.error("Persisting auction state failed, reloading last committed state")
            self._load_from_storage()
            raise
