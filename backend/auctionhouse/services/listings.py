import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError
from ..config import default_auction_hours
from ..models.listing import Listing
from .errors import ErrorKind, Result
from .store import SqlStore

log = logging.getLogger("uvicorn.error")

OPEN = "open"
CLOSED = "closed"

# Fields an update may touch; owner_id is immutable
EDITABLE_FIELDS = ("title", "description", "price", "image_path", "is_sold", "end_time")


def as_utc(value: datetime) -> datetime:
    # sqlite returns naive datetimes; treat naive as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def listing_status(listing: Listing, now: datetime) -> str:
    return CLOSED if as_utc(now) >= as_utc(listing.end_time) else OPEN


def _may_modify(listing: Listing, caller_id: str, is_admin: bool) -> bool:
    return is_admin or listing.owner_id == caller_id


def create_listing(
    store: SqlStore,
    owner_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    price: Optional[Decimal] = None,
    end_time: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Listing:
    if end_time is None:
        now = now or datetime.now(timezone.utc)
        end_time = as_utc(now) + timedelta(hours=default_auction_hours())
    listing = Listing(
        title=title,
        description=description,
        price=price,
        end_time=as_utc(end_time),
        owner_id=owner_id,
        is_sold=False,
    )
    store.add(listing)
    log.info("listing created id=%s owner=%s", listing.id, owner_id)
    return listing


def get_listing(store: SqlStore, listing_id: str) -> Optional[Listing]:
    return store.find_by_id(Listing, listing_id, includes=("owner", "bids", "comments"))


def list_listings(
    store: SqlStore,
    now: datetime,
    status: Optional[str] = None,
    owner_id: Optional[str] = None,
) -> List[Listing]:
    q = store.query(Listing).options(selectinload(Listing.bids))
    if owner_id:
        q = q.filter(Listing.owner_id == owner_id)
    rows = q.order_by(Listing.end_time).all()
    if status in (OPEN, CLOSED):
        rows = [r for r in rows if listing_status(r, now) == status]
    return rows


def update_listing(
    store: SqlStore,
    listing_id: str,
    caller_id: str,
    fields: Dict[str, Any],
    is_admin: bool = False,
) -> Result[Listing]:
    """Apply field changes to a listing owned by the caller.

    ``fields`` may carry ``version``, the version the caller last read; a
    mismatch yields CONCURRENT_MODIFICATION without writing.
    """
    listing = store.find_by_id(Listing, listing_id)
    if listing is None:
        return Result.failure(ErrorKind.NOT_FOUND)
    if not _may_modify(listing, caller_id, is_admin):
        log.warning("update rejected: caller=%s is not owner of listing=%s", caller_id, listing_id)
        return Result.failure(ErrorKind.UNAUTHORIZED)

    expected = fields.get("version")
    if expected is not None and expected != listing.version:
        return Result.failure(ErrorKind.CONCURRENT_MODIFICATION)
    if listing.is_sold and fields.get("is_sold") is False:
        return Result.failure(ErrorKind.INVALID_TRANSITION)

    for name in EDITABLE_FIELDS:
        if name in fields:
            value = fields[name]
            if name == "end_time" and value is not None:
                value = as_utc(value)
            if name in ("is_sold", "end_time") and value is None:
                continue
            setattr(listing, name, value)

    try:
        store.update(listing)
    except StaleDataError:
        store.rollback()
        if not store.exists(Listing, listing_id):
            return Result.failure(ErrorKind.NOT_FOUND)
        return Result.failure(ErrorKind.CONCURRENT_MODIFICATION)
    log.info("listing updated id=%s version=%s", listing.id, listing.version)
    return Result.success(listing)


def delete_listing(store: SqlStore, listing_id: str, caller_id: str, is_admin: bool = False) -> Result[None]:
    listing = store.find_by_id(Listing, listing_id)
    if listing is None:
        # Already gone
        return Result.success()
    if not _may_modify(listing, caller_id, is_admin):
        log.warning("delete rejected: caller=%s is not owner of listing=%s", caller_id, listing_id)
        return Result.failure(ErrorKind.UNAUTHORIZED)
    store.remove(listing)
    log.info("listing deleted id=%s", listing_id)
    return Result.success()
