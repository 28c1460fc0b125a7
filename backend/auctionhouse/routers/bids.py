from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..db import get_db
from ..schemas.bids import BidCreate
from ..schemas.listings import BidOut
from ..services.bidding import place_bid
from ..services.identity import Caller, require_caller
from ..services.store import SqlStore
from .responses import unwrap

router = APIRouter()


@router.post("/", response_model=BidOut)
async def create_bid(payload: BidCreate, caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    result = place_bid(SqlStore(db), payload.listing_id, caller.user_id, payload.amount, now=datetime.now(timezone.utc))
    return unwrap(result)
