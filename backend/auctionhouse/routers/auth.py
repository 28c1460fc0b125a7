import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..db import get_db
from ..models.user import User
from ..schemas.auth import LoginRequest, LoginResponse, SignupRequest, UserPublic
from ..services import accounts
from ..services.identity import Caller, require_caller
from ..services.store import SqlStore
from .responses import unwrap

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.post("/signup", response_model=LoginResponse)
async def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    user = unwrap(accounts.register(SqlStore(db), payload.username, payload.email, payload.password))
    return LoginResponse(user=UserPublic.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = accounts.authenticate(SqlStore(db), payload.email, payload.password)
    if not user:
        log.warning("login failed for email=%s", payload.email.lower())
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return LoginResponse(user=UserPublic.model_validate(user))


@router.get("/me", response_model=UserPublic)
async def me(caller: Caller = Depends(require_caller), db: Session = Depends(get_db)):
    return db.query(User).filter(User.id == caller.user_id).one()
