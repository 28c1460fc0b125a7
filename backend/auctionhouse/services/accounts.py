import logging
from typing import Optional
import bcrypt
from ..config import get_setting
from ..models.user import User
from .errors import ErrorKind, Result
from .store import SqlStore

log = logging.getLogger("uvicorn.error")


def _find_by_email(store: SqlStore, email: str) -> Optional[User]:
    return store.query(User).filter(User.email == email.strip().lower()).one_or_none()


def register(store: SqlStore, username: str, email: str, password: str) -> Result[User]:
    email = email.strip().lower()
    if _find_by_email(store, email):
        return Result.failure(ErrorKind.CONFLICT)
    pw_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(int(get_setting("BCRYPT_ROUNDS", 12)))).decode("utf-8")
    user = User(username=username.strip(), email=email, password=pw_hash)
    store.add(user)
    log.info("user registered id=%s", user.id)
    return Result.success(user)


def authenticate(store: SqlStore, email: str, password: str) -> Optional[User]:
    user = _find_by_email(store, email)
    if not user or not user.password:
        return None
    if not bcrypt.checkpw(password.encode("utf-8"), user.password.encode("utf-8")):
        return None
    return user
