# backend/inventorydb/apps/accounts/router_public.py

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventorydb import security
from inventorydb.database import get_db
from . import models, schemas, services

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_fields(pair: security.TokenPair) -> dict:
    return {
        "access_token": pair.access_token,
        "refresh_token": pair.refresh_token,
        "access_expires_at": pair.access_expires_at,
        "refresh_expires_at": pair.refresh_expires_at,
    }


@router.post(
    "/login",
    response_model=schemas.LoginResponse,
    summary="Login with username and password",
)
def login(
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Verify credentials and return the user together with a fresh
    access/refresh token pair.
    """
    user = services.login(db, payload.username, payload.password)
    pair = security.issue_token_pair(user)
    return schemas.LoginResponse(
        user=user,
        **_token_fields(pair),
    )


@router.post(
    "/refresh",
    response_model=schemas.TokenPairRead,
    summary="Exchange a refresh token for a new token pair",
)
def refresh(
    payload: schemas.RefreshRequest,
    db: Session = Depends(get_db),
):
    _user, pair = services.refresh_tokens(db, payload.refresh_token)
    return schemas.TokenPairRead(**_token_fields(pair))


@router.get("/me", response_model=schemas.UserRead)
def read_current_user(
    current_user: models.User = Depends(security.get_current_user),
):
    return current_user
