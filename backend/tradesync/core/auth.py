from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from tradesync.core.config import settings
from tradesync.core.errors import AuthError, BrokerScopeError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class TokenClaims:
    """Identity carried by a bearer token."""

    user_id: int
    username: str = ""
    brokers: list[str] = field(default_factory=list)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_user_token(user_id: int, username: str, brokers: list[str]) -> str:
    return create_access_token({"sub": str(user_id), "username": username, "brokers": list(brokers)})


def decode_token(token: str) -> TokenClaims:
    """Verify signature + expiry and return the claims. Raises AuthError."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")

    user_id_str = payload.get("sub")
    if user_id_str is None:
        raise AuthError("Invalid or expired token")
    try:
        user_id = int(user_id_str)
    except (TypeError, ValueError):
        raise AuthError("Invalid or expired token")

    brokers = payload.get("brokers") or []
    if not isinstance(brokers, list):
        raise AuthError("Invalid or expired token")

    return TokenClaims(user_id=user_id, username=payload.get("username", ""), brokers=[str(b) for b in brokers])


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("Authentication token is required")
    return decode_token(credentials.credentials)


def require_broker_scope(broker_code: str):
    """Dependency factory: the token must list ``broker_code`` in its brokers claim."""

    def _check(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if broker_code not in claims.brokers:
            raise BrokerScopeError("User does not have access to this broker")
        return claims

    return _check


def ensure_scope(claims: TokenClaims, broker_codes: list[str]) -> None:
    missing = [code for code in broker_codes if code not in claims.brokers]
    if missing:
        raise BrokerScopeError(f"User does not have access to broker(s): {', '.join(missing)}")
