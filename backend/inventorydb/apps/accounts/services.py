# backend/inventorydb/apps/accounts/services.py

"""
Account services: user management and password login.

Token signing lives in `inventorydb.security`; this module decides *who*
gets a token, never how it is encoded.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventorydb import security
from inventorydb.errors import AuthenticationFailed, ConstraintViolation, InvalidToken, NotFound
from . import models, schemas

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid username or password."

# Verified against for unknown usernames so both failure paths cost one hash.
_DUMMY_HASH: Optional[str] = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = security.hash_password("not-a-real-password")
    return _DUMMY_HASH


def _normalise_username(username: str) -> str:
    return (username or "").strip()


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    """Exact (case-sensitive) username match."""
    return db.query(models.User).filter(models.User.username == username).first()


def get_user(db: Session, user_id: str) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found.")
    return user


def list_users(db: Session) -> List[models.User]:
    return db.query(models.User).order_by(models.User.username.asc()).all()


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------


def create_user(
    db: Session,
    *,
    username: str,
    password: str,
    permission_role: models.PermissionRole = models.PermissionRole.VIEWER,
) -> models.User:
    username = _normalise_username(username)
    if not username:
        raise ConstraintViolation("Username must not be blank.")
    if not password:
        raise ConstraintViolation("Password must not be blank.")
    if get_user_by_username(db, username) is not None:
        raise ConstraintViolation(f"Username {username!r} is already taken.")

    user = models.User(
        username=username,
        password_hash=security.hash_password(password),
        permission_role=models.PermissionRole(permission_role),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConstraintViolation(f"Username {username!r} is already taken.")

    logger.info("Created user %s (%s) with role %s", user.id, username, user.permission_role.value)
    return user


def set_permission_role(
    db: Session,
    *,
    user_id: str,
    permission_role: models.PermissionRole,
) -> models.User:
    user = get_user(db, user_id)
    previous = models.PermissionRole(user.permission_role)
    user.permission_role = models.PermissionRole(permission_role)
    db.flush()
    logger.info(
        "Changed role of user %s from %s to %s",
        user.id,
        previous.value,
        user.permission_role.value,
    )
    return user


def change_password(
    db: Session,
    *,
    user: models.User,
    current_password: str,
    new_password: str,
) -> models.User:
    if not security.verify_password(current_password, user.password_hash):
        logger.warning("Password change refused for user %s: bad current password", user.id)
        raise AuthenticationFailed(_INVALID_CREDENTIALS)
    if not new_password:
        raise ConstraintViolation("Password must not be blank.")
    user.password_hash = security.hash_password(new_password)
    db.flush()
    logger.info("Password changed for user %s", user.id)
    return user


# ---------------------------------------------------------------------------
# Login / tokens
# ---------------------------------------------------------------------------


def login(db: Session, username: str, password: str) -> schemas.UserRead:
    """
    Authenticate a username/password pair against the stored hash.

    Unknown usernames and wrong passwords raise the same AuthenticationFailed
    so callers cannot tell which half was wrong. Returns the public user
    record, which has no password hash. Token issuance is left to the caller
    (see `security.issue_token_pair`).
    """
    user = get_user_by_username(db, username)

    if user is None:
        security.verify_password(password, _dummy_hash())
        logger.warning("Failed login attempt")
        raise AuthenticationFailed(_INVALID_CREDENTIALS)

    if not security.verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise AuthenticationFailed(_INVALID_CREDENTIALS)

    logger.info("User %s logged in", user.id)
    return schemas.UserRead.model_validate(user)


def refresh_tokens(db: Session, refresh_token: str) -> tuple[models.User, security.TokenPair]:
    """
    Exchange a valid refresh token for a new pair.

    The user is reloaded so the new tokens carry the current role.
    """
    claims = security.verify_token(refresh_token, security.REFRESH)
    user = db.get(models.User, claims.get("id"))
    if user is None:
        logger.warning("Refresh token for unknown user %s", claims.get("id"))
        raise InvalidToken("Invalid or expired token.")
    return user, security.issue_token_pair(user)
