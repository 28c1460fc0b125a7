import logging
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from sqlalchemy.orm.exc import StaleDataError
from ..models.listing import Listing, Bid
from .errors import ErrorKind, Result
from .listings import CLOSED, listing_status
from .store import SqlStore

log = logging.getLogger("uvicorn.error")

# Bid.price and Listing.price are Numeric(12, 2)
CENTS = Decimal("0.01")


def to_cents(amount) -> Decimal:
    """Truncate to the stored two-decimal scale, so the compared value is the saved value."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_DOWN)


def floor_price(listing: Listing) -> Decimal:
    """Amount a new bid must exceed: the highest bid, else the starting price."""
    if listing.bids:
        return max(Decimal(b.price) for b in listing.bids)
    return Decimal(listing.price) if listing.price is not None else Decimal("0")


def place_bid(store: SqlStore, listing_id: str, bidder_id: str, amount: Decimal, now: datetime) -> Result[Bid]:
    """Validate a bid against the listing's current state and record it.

    The listing and all of its bids are read in one fetch so the floor is
    computed from the complete bid set. The insert commits together with a
    bump of the listing's version, so a bid validated against a floor that
    another bid has since raised fails with CONCURRENT_MODIFICATION instead
    of being recorded. Nothing is written on rejection.
    """
    listing = store.find_by_id(Listing, listing_id, includes=("bids",), for_update=True)
    if listing is None:
        return Result.failure(ErrorKind.NOT_FOUND)

    if listing_status(listing, now) == CLOSED:
        store.rollback()
        log.warning("bid rejected: listing=%s closed at %s", listing_id, listing.end_time)
        return Result.failure(ErrorKind.AUCTION_CLOSED)

    amount = to_cents(amount)
    floor = floor_price(listing)
    if amount <= floor:
        store.rollback()
        log.warning("bid rejected: listing=%s amount=%s floor=%s", listing_id, amount, floor)
        return Result.failure(ErrorKind.BID_TOO_LOW)

    bid = Bid(listing_id=listing.id, price=amount, bidder_id=bidder_id)
    # UPDATE ... WHERE version = <read version>; a concurrent bid makes it match no row
    listing.bid_count = (listing.bid_count or 0) + 1
    try:
        store.add(bid)
    except StaleDataError:
        store.rollback()
        if not store.exists(Listing, listing_id):
            return Result.failure(ErrorKind.NOT_FOUND)
        log.warning("bid rejected: listing=%s changed while bid %s was validated", listing_id, amount)
        return Result.failure(ErrorKind.CONCURRENT_MODIFICATION)
    log.info("bid accepted id=%s listing=%s bidder=%s amount=%s", bid.id, listing_id, bidder_id, amount)
    return Result.success(bid)
