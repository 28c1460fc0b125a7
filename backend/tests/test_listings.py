from datetime import timedelta
from decimal import Decimal

from auctionhouse.db import SessionLocal
from auctionhouse.models import Bid, Comment, Listing
from auctionhouse.services import listings as svc
from auctionhouse.services.errors import ErrorKind
from auctionhouse.services.listings import as_utc

from conftest import NOW


def test_create_sets_owner_and_defaults(store, make_user):
    alice = make_user("alice")
    listing = svc.create_listing(store, alice.id, title="Bike", description="Red", price=Decimal("25.50"), now=NOW)

    assert listing.owner_id == alice.id
    assert listing.is_sold is False
    assert listing.price == Decimal("25.50")
    assert listing.version == 1
    assert as_utc(listing.end_time) == NOW + timedelta(hours=168)


def test_create_uses_configured_duration(store, make_user, monkeypatch):
    monkeypatch.setenv("AUCTION_DEFAULT_HOURS", "2")
    listing = svc.create_listing(store, make_user().id, now=NOW)
    assert as_utc(listing.end_time) == NOW + timedelta(hours=2)


def test_create_allows_missing_fields(store, make_user):
    listing = svc.create_listing(store, make_user().id, end_time=NOW + timedelta(days=1))
    assert listing.title is None
    assert listing.description is None
    assert listing.price is None


def test_status_is_computed_from_time(make_listing):
    listing = make_listing(ends_in=timedelta(hours=1))
    assert svc.listing_status(listing, NOW) == svc.OPEN
    assert svc.listing_status(listing, NOW + timedelta(hours=1)) == svc.CLOSED
    assert svc.listing_status(listing, NOW + timedelta(days=3)) == svc.CLOSED
    assert listing.is_sold is False


def test_update_unknown_listing(store, make_user):
    result = svc.update_listing(store, "999", make_user().id, {"title": "x"})
    assert result.error == ErrorKind.NOT_FOUND


def test_owner_can_update(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    result = svc.update_listing(store, listing.id, owner.id, {"title": "Brass lamp", "price": Decimal("80"), "is_sold": True})

    assert result.ok
    assert result.value.title == "Brass lamp"
    assert result.value.price == Decimal("80")
    assert result.value.is_sold is True
    assert result.value.version == 2


def test_update_by_non_owner_is_rejected(store, make_listing, make_user):
    listing = make_listing()
    result = svc.update_listing(store, listing.id, make_user("mallory").id, {"title": "mine now"})

    assert result.error == ErrorKind.UNAUTHORIZED
    store.db.expire_all()
    assert store.find_by_id(Listing, listing.id).title == "Vintage lamp"


def test_admin_can_update_any_listing(store, make_listing, make_user):
    listing = make_listing()
    admin = make_user("root", is_admin=True)
    result = svc.update_listing(store, listing.id, admin.id, {"description": "moderated"}, is_admin=True)
    assert result.ok
    assert result.value.description == "moderated"


def test_owner_cannot_be_changed(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    other = make_user("bob")
    result = svc.update_listing(store, listing.id, owner.id, {"owner_id": other.id, "title": "t"})
    assert result.ok
    assert result.value.owner_id == owner.id


def test_stale_version_is_rejected(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    assert svc.update_listing(store, listing.id, owner.id, {"title": "first", "version": 1}).ok

    result = svc.update_listing(store, listing.id, owner.id, {"title": "second", "version": 1})
    assert result.error == ErrorKind.CONCURRENT_MODIFICATION
    assert store.find_by_id(Listing, listing.id).title == "first"


def test_conflicting_write_from_another_session(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    # Pin the row in this session's identity map at version 1
    assert store.find_by_id(Listing, listing.id).version == 1

    other = SessionLocal()
    try:
        other.query(Listing).filter(Listing.id == listing.id).one().title = "changed elsewhere"
        other.commit()
    finally:
        other.close()

    result = svc.update_listing(store, listing.id, owner.id, {"title": "mine"})
    assert result.error == ErrorKind.CONCURRENT_MODIFICATION


def test_conflicting_delete_from_another_session(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    assert store.find_by_id(Listing, listing.id) is not None

    other = SessionLocal()
    try:
        other.delete(other.query(Listing).filter(Listing.id == listing.id).one())
        other.commit()
    finally:
        other.close()

    result = svc.update_listing(store, listing.id, owner.id, {"title": "mine"})
    assert result.error == ErrorKind.NOT_FOUND


def test_sold_listing_cannot_be_unsold(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)
    assert svc.update_listing(store, listing.id, owner.id, {"is_sold": True}).ok

    result = svc.update_listing(store, listing.id, owner.id, {"is_sold": False})
    assert result.error == ErrorKind.INVALID_TRANSITION


def test_delete_is_idempotent(store, make_listing, make_user):
    owner = make_user("alice")
    listing = make_listing(owner=owner)

    assert svc.delete_listing(store, listing.id, owner.id).ok
    assert svc.delete_listing(store, listing.id, owner.id).ok
    assert not store.exists(Listing, listing.id)


def test_delete_by_non_owner_is_rejected(store, make_listing, make_user):
    listing = make_listing()
    result = svc.delete_listing(store, listing.id, make_user("mallory").id)
    assert result.error == ErrorKind.UNAUTHORIZED
    assert store.exists(Listing, listing.id)


def test_delete_removes_bids_and_comments(store, make_listing, make_user):
    owner = make_user("alice")
    bob = make_user("bob")
    listing = make_listing(owner=owner)
    store.add(Bid(listing_id=listing.id, bidder_id=bob.id, price=Decimal("120")))
    store.add(Comment(listing_id=listing.id, author_id=bob.id, content="nice"))

    assert svc.delete_listing(store, listing.id, owner.id).ok
    assert store.query(Bid).count() == 0
    assert store.query(Comment).count() == 0


def test_list_filters(store, make_listing, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    open_one = make_listing(owner=alice, ends_in=timedelta(hours=2))
    closed_one = make_listing(owner=bob, ends_in=-timedelta(hours=2))

    assert {l.id for l in svc.list_listings(store, NOW)} == {open_one.id, closed_one.id}
    assert [l.id for l in svc.list_listings(store, NOW, status="open")] == [open_one.id]
    assert [l.id for l in svc.list_listings(store, NOW, status="closed")] == [closed_one.id]
    assert [l.id for l in svc.list_listings(store, NOW, owner_id=bob.id)] == [closed_one.id]


def test_get_listing_loads_related(store, make_listing, make_user):
    listing = make_listing()
    bob = make_user("bob")
    store.add(Bid(listing_id=listing.id, bidder_id=bob.id, price=Decimal("110")))
    store.add(Bid(listing_id=listing.id, bidder_id=bob.id, price=Decimal("130")))
    store.db.expire_all()

    found = svc.get_listing(store, listing.id)
    assert [b.price for b in found.bids] == [Decimal("130"), Decimal("110")]
    assert found.owner.username == "owner"
    assert svc.get_listing(store, "missing") is None
