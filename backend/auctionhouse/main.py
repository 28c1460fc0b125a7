import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from .routers import health, listings, bids, auth
from .routers import images
from .db import Base, engine
from . import models  # noqa: F401
from .mongo import mongo_enabled, get_mongo_db, close_mongo
from .routers import config as config_router
from .config import load_server_config_from_mongo

app = FastAPI(title="Auction House API")
logger = logging.getLogger("uvicorn.error")

# Dev CORS (adjust origins for production)
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(listings.router, prefix="/listings", tags=["listings"])
app.include_router(bids.router, prefix="/bids", tags=["bids"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(images.router, prefix="/images", tags=["images"])
app.include_router(config_router.router, prefix="/config", tags=["config"])


# Create tables & log DB connectivity on startup (simple dev setup; use Alembic in prod)
@app.on_event("startup")
async def on_startup():
	Base.metadata.create_all(bind=engine)

	# Lightweight runtime migration: for dev SQLite DBs created before listings
	# carried an image, a version counter or a bid count, add the missing columns.
	try:
		if engine.dialect.name == "sqlite":
			with engine.begin() as conn:
				rows = conn.execute(text("PRAGMA table_info(listings)")).mappings().all()
				existing = {r["name"] for r in rows}
				added = []
				if "image_path" not in existing:
					conn.execute(text("ALTER TABLE listings ADD COLUMN image_path VARCHAR"))
					added.append("image_path")
				if "version" not in existing:
					conn.execute(text("ALTER TABLE listings ADD COLUMN version INTEGER NOT NULL DEFAULT 1"))
					added.append("version")
				if "bid_count" not in existing:
					conn.execute(text("ALTER TABLE listings ADD COLUMN bid_count INTEGER NOT NULL DEFAULT 0"))
					added.append("bid_count")
				if added:
					logger.info("Added missing listings columns: %s", added)
	except Exception as e:
		logger.warning("Runtime migration check failed: %s", e)

	# Runtime config overrides live in Mongo when configured
	if mongo_enabled():
		try:
			mdb = await get_mongo_db()
			if mdb is None:
				raise RuntimeError("Mongo client not available")
			await mdb.command("ping")
			await load_server_config_from_mongo(mdb)
			logger.info("Server config loaded from MongoDB")
		except Exception as e:
			logger.warning("Loading server config from MongoDB failed: %s", e)

	with engine.begin() as c:
		c.execute(text("SELECT 1"))
	logger.info("Database connected: %s", engine.dialect.name)


@app.on_event("shutdown")
async def on_shutdown():
	close_mongo()


@app.get("/")
def read_root():
	return {"message": "Auction House API is running"}


if __name__ == "__main__":
	import uvicorn
	uvicorn.run(app, host="0.0.0.0", port=8000)
