# backend/inventorydb/security.py

"""
Security helpers for the inventory API.

Responsibilities:
- Password hashing and verification (Argon2id)
- Signing and verifying access / refresh JWTs
- FastAPI dependencies for the current user and minimum-role checks

Tokens are stateless: a token is valid if and only if its signature checks
out under the secret for its kind and its embedded `expiresAt` is still in
the future. There is no revocation list.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from .errors import InvalidToken, PermissionDenied
from inventorydb.apps.accounts import models as account_models
from inventorydb.apps.accounts.models import PermissionRole

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

ACCESS = "access"
REFRESH = "refresh"
TOKEN_KINDS = (ACCESS, REFRESH)

_DEV_ACCESS_SECRET = "CHANGE_ME_ACCESS_SECRET"
_DEV_REFRESH_SECRET = "CHANGE_ME_REFRESH_SECRET"

# In production, ALWAYS override these via environment variables.
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", _DEV_ACCESS_SECRET)
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", _DEV_REFRESH_SECRET)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

if ACCESS_TOKEN_SECRET == _DEV_ACCESS_SECRET or REFRESH_TOKEN_SECRET == _DEV_REFRESH_SECRET:
    logger.warning("ACCESS_TOKEN_SECRET / REFRESH_TOKEN_SECRET not set; using development secrets")


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


ACCESS_TOKEN_EXPIRE_MINUTES: int = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
REFRESH_TOKEN_EXPIRE_DAYS: int = _int_env("REFRESH_TOKEN_EXPIRE_DAYS", 7)

_SECRETS = {ACCESS: ACCESS_TOKEN_SECRET, REFRESH: REFRESH_TOKEN_SECRET}
_LIFETIMES = {
    ACCESS: timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    REFRESH: timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
}

# Used by FastAPI's OAuth2 docs / OpenAPI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# PASSWORD HASHING
# ---------------------------------------------------------------------------

_pwd_hasher = PasswordHasher(
    time_cost=_int_env("ARGON2_TIME_COST", 3),
    memory_cost=_int_env("ARGON2_MEMORY_COST", 65536),  # KiB (64MB)
    parallelism=_int_env("ARGON2_PARALLELISM", 2),
    hash_len=_int_env("ARGON2_HASH_LEN", 32),
    salt_len=_int_env("ARGON2_SALT_LEN", 16),
)


def hash_password(password: str) -> str:
    """Hash a password for storing in the database (Argon2id)."""
    return _pwd_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the plain password matches the hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return _pwd_hasher.verify(hashed_password, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


# ---------------------------------------------------------------------------
# JWT TOKENS
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    access_expires_at: int
    refresh_expires_at: int


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def create_token(profile: dict, kind: str, *, now: Optional[datetime] = None) -> tuple[str, int]:
    """
    Sign a token of the given kind embedding `{user, expiresAt}`.

    Returns (token_string, expires_at_epoch_seconds).
    """
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind {kind!r}")

    expires_at = int((_now(now) + _LIFETIMES[kind]).timestamp())
    payload = {
        "user": dict(profile),
        "expiresAt": expires_at,
        "kind": kind,
    }
    token = jwt.encode(payload, _SECRETS[kind], algorithm=JWT_ALGORITHM)
    return token, expires_at


def user_claims(user) -> dict:
    """Token-safe view of a User row or UserRead (never the password hash)."""
    return {
        "id": user.id,
        "username": user.username,
        "permission_role": PermissionRole(user.permission_role).value,
    }


def issue_token_pair(user, *, now: Optional[datetime] = None) -> TokenPair:
    """Issue a short-lived access token and a long-lived refresh token."""
    profile = user_claims(user)
    access_token, access_expires_at = create_token(profile, ACCESS, now=now)
    refresh_token, refresh_expires_at = create_token(profile, REFRESH, now=now)
    logger.info("Issued token pair for user %s", user.id)
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        access_expires_at=access_expires_at,
        refresh_expires_at=refresh_expires_at,
    )


def verify_token(token: str, kind: str, *, now: Optional[datetime] = None) -> dict:
    """
    Check a token's signature against the secret for `kind` and its expiry.

    Returns the embedded user claims. Raises InvalidToken otherwise.
    """
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind {kind!r}")

    try:
        # expiry is checked below against `expiresAt`, so `now` is injectable
        payload = jwt.decode(
            token,
            _SECRETS[kind],
            algorithms=[JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        logger.warning("Rejected %s token: bad signature or malformed", kind)
        raise InvalidToken("Invalid or expired token.")

    user = payload.get("user")
    expires_at = payload.get("expiresAt")
    if (
        payload.get("kind") != kind
        or not isinstance(user, dict)
        or not user.get("id")
        or not isinstance(expires_at, (int, float))
    ):
        logger.warning("Rejected %s token: unexpected payload shape", kind)
        raise InvalidToken("Invalid or expired token.")

    if _now(now).timestamp() >= expires_at:
        logger.warning("Rejected %s token for user %s: expired", kind, user.get("id"))
        raise InvalidToken("Invalid or expired token.")

    return user


# ---------------------------------------------------------------------------
# USER LOOKUP HELPERS
# ---------------------------------------------------------------------------


def get_user_by_id(db: Session, user_id: Optional[str]) -> Optional[account_models.User]:
    if user_id is None:
        return None
    return db.get(account_models.User, str(user_id).strip())


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> account_models.User:
    """
    Verify the bearer access token and return the corresponding User.

    The role is taken from the database row, not the token claims, so a
    demotion applies to tokens issued before it.
    """
    claims = verify_token(token, ACCESS)
    user = get_user_by_id(db, claims.get("id"))
    if user is None:
        raise InvalidToken("Invalid or expired token.")
    return user


def require_role(
    minimum: PermissionRole | str,
) -> Callable[[account_models.User], account_models.User]:
    """
    Dependency factory: the current user's role must be at least `minimum`.

    Usage:
        @router.post(...)
        def endpoint(current_user: User = Depends(require_role(PermissionRole.EDITOR))):
            ...
    """
    required = PermissionRole(minimum)

    def dependency(
        current_user: account_models.User = Depends(get_current_user),
    ) -> account_models.User:
        if not PermissionRole(current_user.permission_role).at_least(required):
            raise PermissionDenied(
                f"This operation requires the {required.value} role or higher."
            )
        return current_user

    return dependency
