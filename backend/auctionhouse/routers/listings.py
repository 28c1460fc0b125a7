from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import uuid4
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from ..config import max_image_bytes, media_root
from ..db import get_db
from ..models.listing import Listing as ListingModel
from ..schemas.listings import CommentCreate, CommentOut, Listing, ListingCreate, ListingDetail, ListingUpdate, Status
from ..services import comments as comment_service
from ..services import listings as listing_service
from ..services.bidding import floor_price
from ..services.identity import Caller, require_caller
from ..services.store import SqlStore
from .responses import unwrap

router = APIRouter()

_IMAGE_TYPES = {"image/jpeg": ".jpg", "image/png": ".png"}
_LOCAL_PREFIX = "/images/local/uploads/"


def _out(listing: ListingModel, now: datetime, detail: bool = False):
    schema = ListingDetail if detail else Listing
    return schema.model_validate(listing).model_copy(update={
        "status": listing_service.listing_status(listing, now),
        "current_price": floor_price(listing),
    })


def _remove_local_image(uploads_dir: Path, image_path: Optional[str]) -> None:
    # Only files this service stored under MEDIA_ROOT/uploads
    if not image_path or not image_path.startswith(_LOCAL_PREFIX):
        return
    (uploads_dir / Path(image_path[len(_LOCAL_PREFIX):]).name).unlink(missing_ok=True)


@router.get("/", response_model=List[Listing])
async def list_listings(status: Optional[Status] = None, owner_id: Optional[str] = None, db: Session = Depends(get_db)):
    now = datetime.now(timezone.utc)
    rows = listing_service.list_listings(SqlStore(db), now, status=status, owner_id=owner_id)
    return [_out(r, now) for r in rows]


@router.get("/{listing_id}", response_model=ListingDetail)
async def get_listing(listing_id: str, db: Session = Depends(get_db)):
    listing = listing_service.get_listing(SqlStore(db), listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail="Not found")
    return _out(listing, datetime.now(timezone.utc), detail=True)


@router.post("/", response_model=Listing)
async def create_listing(payload: ListingCreate, caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    now = datetime.now(timezone.utc)
    listing = listing_service.create_listing(
        SqlStore(db),
        owner_id=caller.user_id,
        title=payload.title,
        description=payload.description,
        price=payload.price,
        end_time=payload.end_time,
        now=now,
    )
    return _out(listing, now)


@router.put("/{listing_id}", response_model=Listing)
async def update_listing(listing_id: str, payload: ListingUpdate, caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    result = listing_service.update_listing(
        SqlStore(db), listing_id, caller.user_id, payload.model_dump(exclude_unset=True), is_admin=caller.is_admin
    )
    return _out(unwrap(result), datetime.now(timezone.utc))


@router.delete("/{listing_id}")
async def delete_listing(listing_id: str, caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    unwrap(listing_service.delete_listing(SqlStore(db), listing_id, caller.user_id, is_admin=caller.is_admin))
    return {"ok": True}


@router.post("/{listing_id}/image", response_model=Listing)
async def upload_image(
    listing_id: str,
    file: UploadFile = File(...),
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    ext = _IMAGE_TYPES.get(file.content_type or "")
    if not ext:
        raise HTTPException(status_code=400, detail="Only JPEG and PNG images are supported")
    store = SqlStore(db)
    listing = store.find_by_id(ListingModel, listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail="Not found")
    if listing.owner_id != caller.user_id and not caller.is_admin:
        raise HTTPException(status_code=403, detail="Only the owner can modify this listing.")

    limit = max_image_bytes()
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(status_code=413, detail=f"Image larger than {limit} bytes")

    previous = listing.image_path
    uploads_dir = Path(media_root()) / "uploads"
    uploads_dir.mkdir(parents=True, exist_ok=True)
    fname = f"listing_{uuid4().hex}{ext}"
    fpath = uploads_dir / fname
    with open(fpath, "wb") as f:
        f.write(content)

    result = listing_service.update_listing(
        store, listing_id, caller.user_id, {"image_path": f"{_LOCAL_PREFIX}{fname}"}, is_admin=caller.is_admin
    )
    if not result.ok:
        fpath.unlink(missing_ok=True)
        unwrap(result)
    _remove_local_image(uploads_dir, previous)
    return _out(result.value, datetime.now(timezone.utc))


@router.post("/{listing_id}/comments", response_model=CommentOut)
async def add_comment(listing_id: str, payload: CommentCreate, caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    return unwrap(comment_service.add_comment(SqlStore(db), listing_id, caller.user_id, payload.content))
