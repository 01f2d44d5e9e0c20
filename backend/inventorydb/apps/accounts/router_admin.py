# backend/inventorydb/apps/accounts/router_admin.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventorydb.database import get_db
from inventorydb.security import get_current_user, require_role
from . import models, schemas, services

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_role(models.PermissionRole.ADMIN)


@router.post("", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(admin_only),
):
    user = services.create_user(
        db,
        username=payload.username,
        password=payload.password,
        permission_role=payload.permission_role,
    )
    db.commit()
    db.refresh(user)
    return user


@router.get("", response_model=List[schemas.UserRead])
def list_users(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(admin_only),
):
    return services.list_users(db)


@router.patch("/{user_id}/role", response_model=schemas.UserRead)
def update_user_role(
    user_id: str,
    payload: schemas.UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(admin_only),
):
    user = services.set_permission_role(
        db,
        user_id=user_id,
        permission_role=payload.permission_role,
    )
    db.commit()
    db.refresh(user)
    return user


@router.post("/me/password", status_code=status.HTTP_204_NO_CONTENT)
def change_own_password(
    payload: schemas.PasswordChange,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    services.change_password(
        db,
        user=current_user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    db.commit()
