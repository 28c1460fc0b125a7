from fastapi import APIRouter, Depends
from ..mongo import get_mongo_db
from ..config import get_public_config

router = APIRouter()


# '/config' (no trailing slash) is served too, to avoid 307s behind proxies
@router.get("")
@router.get("/")
async def read_public_config(mdb=Depends(get_mongo_db)):
    """Client-safe settings: AUCTION_PUBLIC_* values and the default auction length."""
    return {"config": await get_public_config(mdb)}
