from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pathlib import Path
from ..config import media_root

router = APIRouter()


@router.get("/local/uploads/{filename}")
async def get_local_image(filename: str):
    # Serve files saved on disk by the listing image upload
    uploads = (Path(media_root()) / "uploads").resolve()
    fpath = (uploads / filename).resolve()
    if fpath.parent != uploads or not fpath.exists():
        raise HTTPException(status_code=404, detail="Not found")
    # naive content type based on extension
    ext = fpath.suffix.lower()
    ctype = "image/jpeg"
    if ext == ".png":
        ctype = "image/png"
    return FileResponse(path=str(fpath), media_type=ctype)
