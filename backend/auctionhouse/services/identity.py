from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from ..db import get_db
from ..models.user import User


@dataclass(frozen=True)
class Caller:
    user_id: str
    is_admin: bool = False


def get_caller(x_user_id: Optional[str] = Header(None), db: Session = Depends(get_db)) -> Optional[Caller]:
    """Resolve the X-User-Id header to a known user.

    Clients set X-User-Id to the id returned by /auth/login. An unknown id is
    treated the same as a missing header.

    The header is not a credential: user ids are public (every listing
    exposes its owner_id), so anyone who sends another user's id acts as
    that user, including passing the owner check on edit and delete. Put
    this service behind a gateway that authenticates the session and sets
    X-User-Id itself before exposing it to untrusted clients.
    """
    if not x_user_id:
        return None
    user = db.query(User).filter(User.id == x_user_id.strip()).one_or_none()
    if not user:
        return None
    return Caller(user_id=user.id, is_admin=bool(user.is_admin))


def require_caller(caller: Optional[Caller] = Depends(get_caller)) -> Caller:
    if not is_authenticated(caller):
        raise HTTPException(status_code=401, detail="Authentication required")
    return caller


def current_user_id(caller: Optional[Caller]) -> Optional[str]:
    return caller.user_id if caller else None


def is_authenticated(caller: Optional[Caller]) -> bool:
    return caller is not None
