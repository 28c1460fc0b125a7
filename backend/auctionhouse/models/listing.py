from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base
from uuid import uuid4


def _new_id() -> str:
    return uuid4().hex


class Listing(Base):
    __tablename__ = "listings"

    id = Column(String, primary_key=True, index=True, default=_new_id)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=True)  # starting price
    image_path = Column(String, nullable=True)
    is_sold = Column(Boolean, nullable=False, default=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    owner_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    bid_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User")
    bids = relationship("Bid", back_populates="listing", cascade="all, delete-orphan", order_by="Bid.price.desc()")
    comments = relationship("Comment", back_populates="listing", cascade="all, delete-orphan", order_by="Comment.created_at")

    # Stale updates raise StaleDataError on flush
    __mapper_args__ = {"version_id_col": version}


class Bid(Base):
    __tablename__ = "bids"

    id = Column(String, primary_key=True, index=True, default=_new_id)
    listing_id = Column(String, ForeignKey("listings.id"), nullable=False, index=True)
    bidder_id = Column(String, ForeignKey("users.id"), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    listing = relationship("Listing", back_populates="bids")
    bidder = relationship("User")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, index=True, default=_new_id)
    content = Column(Text, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    listing_id = Column(String, ForeignKey("listings.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    listing = relationship("Listing", back_populates="comments")
    author = relationship("User")
