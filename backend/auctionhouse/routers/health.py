from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from ..db import get_db
from ..mongo import get_mongo_db, mongo_enabled

router = APIRouter()


@router.get("/")
def root():
    return {"status": "ok"}


@router.get("/db")
async def db_health(db: Session = Depends(get_db), mdb=Depends(get_mongo_db)):
    try:
        db.execute(text("SELECT 1"))
        out = {"status": "ok", "database": "sql"}
    except Exception as e:
        return {"status": "error", "database": "sql", "detail": str(e)}

    # Mongo only backs runtime config; report it when configured
    if mongo_enabled() and mdb is not None:
        try:
            await mdb.command("ping")
            out["config_store"] = "mongo"
        except Exception as e:
            out["status"] = "degraded"
            out["config_store"] = "unavailable"
            out["detail"] = str(e)
    return out
