import os
from pathlib import Path
from typing import Any, Dict, Optional

_SERVER_CONFIG: Dict[str, Any] = {}

PUBLIC_PREFIX = "AUCTION_PUBLIC_"


def get_setting(key: str, default: Optional[Any] = None) -> Any:
    """Read a server-side setting. Precedence: loaded Mongo config -> environment -> default.
    Do not expose these to clients.
    """
    if key in _SERVER_CONFIG:
        return _SERVER_CONFIG[key]
    return os.getenv(key, default)  # type: ignore[no-any-return]


def default_auction_hours() -> float:
    """Auction length used when a listing is created without an end time."""
    raw = get_setting("AUCTION_DEFAULT_HOURS", 168)
    try:
        hours = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"AUCTION_DEFAULT_HOURS must be a number, got {raw!r}")
    if hours <= 0:
        raise ValueError("AUCTION_DEFAULT_HOURS must be positive")
    return hours


def media_root() -> Path:
    return Path(get_setting("MEDIA_ROOT") or Path(__file__).resolve().parents[1] / "media")


def max_image_bytes() -> int:
    return int(get_setting("MAX_IMAGE_BYTES", 5 * 1024 * 1024))


def _allowlisted_public_from_env() -> Dict[str, Any]:
    """Expose only safe, intentionally public values from env.
    Keys beginning with AUCTION_PUBLIC_ are considered safe to ship to clients.
    """
    out: Dict[str, Any] = {}
    for k, v in os.environ.items():
        if k.startswith(PUBLIC_PREFIX):
            out[k] = v
    return out


async def load_server_config_from_mongo(mdb) -> None:
    """Load server config from MongoDB into memory if available.
    The expected document shape (collection: config, id: 'runtime'):
      { _id: 'runtime', server: { KEY: VALUE, ... }, public: { AUCTION_PUBLIC_*: VALUE, ... } }
    """
    if mdb is None:
        return
    coll = mdb.get_collection("config")
    doc = await coll.find_one({"_id": "runtime"})
    if not doc:
        return
    server = doc.get("server") or {}
    if isinstance(server, dict):
        # Merge into memory; prefer Mongo values
        _SERVER_CONFIG.update(server)


async def get_public_config(mdb) -> Dict[str, Any]:
    """Return public configuration for clients. Combines Mongo 'public' map and AUCTION_PUBLIC_* envs."""
    public: Dict[str, Any] = {}
    if mdb is not None:
        coll = mdb.get_collection("config")
        doc = await coll.find_one({"_id": "runtime"})
        if doc and isinstance(doc.get("public"), dict):
            public.update(doc["public"])  # type: ignore[index]
    # Env wins as an override
    public.update(_allowlisted_public_from_env())
    public.setdefault("AUCTION_DEFAULT_HOURS", default_auction_hours())
    return public
