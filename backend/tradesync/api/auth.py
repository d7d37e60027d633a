import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from tradesync.core.auth import (
    TokenClaims, hash_password, verify_password, issue_user_token, get_current_claims,
)
from tradesync.core.database import get_db
from tradesync.core.errors import AuthError, ConflictError
from tradesync.models.broker import Broker
from tradesync.models.user import User
from tradesync.schemas.auth import (
    UserCreate, UserLogin, UserResponse, AuthResponse, ClaimsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        brokers=user.broker_codes,
    )


# ─── Register ───
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, db: Session = Depends(get_db)):
    existing = db.query(User).filter(
        or_(User.username == data.username, User.email == data.email)
    ).first()
    if existing:
        raise ConflictError("Username or email already in use")

    brokers = []
    if data.broker_codes:
        brokers = db.query(Broker).filter(Broker.code.in_(data.broker_codes)).all()

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name or "",
        last_name=data.last_name or "",
        brokers=brokers,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with brokers %s", user.username, user.broker_codes)

    token = issue_user_token(user.id, user.username, user.broker_codes)
    return AuthResponse(message="User registered successfully", user=_user_response(user), token=token)


# ─── Login ───
@router.post("/login", response_model=AuthResponse)
def login(data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise AuthError("Invalid username or password")
    token = issue_user_token(user.id, user.username, user.broker_codes)
    return AuthResponse(message="Login successful", user=_user_response(user), token=token)


# ─── Current token claims ───
@router.get("/me", response_model=ClaimsResponse)
def get_me(claims: TokenClaims = Depends(get_current_claims)):
    return ClaimsResponse(user_id=claims.user_id, username=claims.username, brokers=claims.brokers)
