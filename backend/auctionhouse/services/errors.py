"""Business-rule outcomes shared by the services.

Services return a :class:`Result` for anything a caller is expected to
handle (missing listing, closed auction, low bid, ...). Infrastructure
failures are not wrapped and propagate as exceptions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    AUCTION_CLOSED = "AUCTION_CLOSED"
    BID_TOO_LOW = "BID_TOO_LOW"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFLICT = "CONFLICT"


MESSAGES = {
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.AUCTION_CLOSED: "This auction has ended.",
    ErrorKind.BID_TOO_LOW: "Your bid must be higher than the current price.",
    ErrorKind.UNAUTHORIZED: "Only the owner can modify this listing.",
    ErrorKind.CONCURRENT_MODIFICATION: "The listing was modified by someone else. Reload and try again.",
    ErrorKind.INVALID_TRANSITION: "A sold listing cannot be marked unsold.",
    ErrorKind.CONFLICT: "Already exists",
}


@dataclass
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return MESSAGES.get(self.error) if self.error else None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind) -> "Result[T]":
        return cls(error=error)
