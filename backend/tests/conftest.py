import os

# Must be set before the app modules read them
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MONGO_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from auctionhouse.db import Base, SessionLocal, engine
from auctionhouse.main import app
from auctionhouse.models import Listing, User
from auctionhouse.services.store import SqlStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return SqlStore(db)


@pytest.fixture
def make_user(db):
    def _make(username="alice", is_admin=False):
        user = User(username=username, email=f"{username}@example.com", password="unused", is_admin=is_admin)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_listing(store, make_user):
    def _make(price="100", ends_in=timedelta(hours=1), owner=None):
        owner = owner or make_user("owner")
        listing = Listing(
            title="Vintage lamp",
            price=Decimal(price) if price is not None else None,
            end_time=NOW + ends_in,
            owner_id=owner.id,
            is_sold=False,
        )
        return store.add(listing)
    return _make


@pytest.fixture
def client():
    return TestClient(app)
