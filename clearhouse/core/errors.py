"""
Typed failures raised by auction operations.

Every operation validates before it mutates, so an AuctionError
leaves the ledgers exactly as they were before the call.
"""

from enum import IntEnum


class ErrorKind(IntEnum):
    """Failure categories surfaced to callers."""
    ROUND_ALREADY_OPEN = 1
    ROUND_CLOSED = 2
    SELF_DEALING = 3
    BID_TOO_LOW = 4
    ITEM_NOT_FOUND = 5
    INSUFFICIENT_HOLD = 6
    ARITHMETIC_UNDERFLOW = 7
    IDENTIFIER_COLLISION = 8


class AuctionError(Exception):
    """Base class for auction failures."""

    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind

    def to_dict(self) -> dict:
        return {"error": self.kind.name, "message": str(self)}


class RoundAlreadyOpen(AuctionError):
    kind = ErrorKind.ROUND_ALREADY_OPEN


class RoundClosed(AuctionError):
    kind = ErrorKind.ROUND_CLOSED


class SelfDealing(AuctionError):
    kind = ErrorKind.SELF_DEALING


class BidTooLow(AuctionError):
    kind = ErrorKind.BID_TOO_LOW


class ItemNotFound(AuctionError):
    kind = ErrorKind.ITEM_NOT_FOUND


class InsufficientHold(AuctionError):
    kind = ErrorKind.INSUFFICIENT_HOLD


class ArithmeticUnderflow(AuctionError):
    kind = ErrorKind.ARITHMETIC_UNDERFLOW


class IdentifierCollision(AuctionError):
    kind = ErrorKind.IDENTIFIER_COLLISION


__all__ = [
    "ErrorKind",
    "AuctionError",
    "RoundAlreadyOpen",
    "RoundClosed",
    "SelfDealing",
    "BidTooLow",
    "ItemNotFound",
    "InsufficientHold",
    "ArithmeticUnderflow",
    "IdentifierCollision",
]
