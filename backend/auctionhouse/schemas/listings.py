from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

Status = Literal["open", "closed"]


class ListingBase(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class ListingCreate(ListingBase):
    # Owner is taken from the caller; an owner_id in the payload is ignored
    end_time: Optional[datetime] = None


class ListingUpdate(ListingBase):
    image_path: Optional[str] = None
    is_sold: Optional[bool] = None
    end_time: Optional[datetime] = None
    version: Optional[int] = Field(default=None, description="Version last read; rejects stale edits")


class Listing(ListingBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    image_path: Optional[str] = None
    is_sold: bool = False
    end_time: datetime
    bid_count: int = 0
    version: int
    status: Optional[Status] = None
    current_price: Optional[Decimal] = None


class BidOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    listing_id: str
    bidder_id: str
    price: Decimal
    created_at: Optional[datetime] = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)

    @field_validator("content", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    listing_id: Optional[str] = None
    author_id: str
    content: str
    created_at: Optional[datetime] = None


class ListingDetail(Listing):
    bids: List[BidOut] = []
    comments: List[CommentOut] = []
