from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventorydb.database import get_db
from inventorydb.security import require_role
from inventorydb.apps.accounts import models as account_models

from . import schemas, services

router = APIRouter(prefix="/items", tags=["inventory"])

READ_ROLE = require_role(account_models.PermissionRole.VIEWER)
WRITE_ROLE = require_role(account_models.PermissionRole.EDITOR)


@router.post(
    "",
    response_model=schemas.InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
)
def create_inventory_item(
    payload: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    item = services.create_inventory_item(db, **payload.model_dump())
    db.commit()
    db.refresh(item)
    return item


@router.get("", response_model=List[schemas.InventoryItemRead])
def list_items(
    location_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_items_at_location(db, location_id=location_id)


@router.get("/{item_id}", response_model=schemas.InventoryItemRead)
def get_inventory_item(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.get_inventory_item(db, item_id)


@router.get("/{item_id}/path", response_model=List[schemas.InventoryItemRead])
def get_location_path(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.location_path(db, item_id=item_id)


@router.post("/{item_id}/move", response_model=schemas.InventoryItemRead)
def move_inventory_item(
    item_id: str,
    payload: schemas.InventoryItemMove,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    item = services.move_inventory_item(db, item_id=item_id, location_id=payload.location_id)
    db.commit()
    db.refresh(item)
    return item


@router.post("/{item_id}/state", response_model=schemas.InventoryItemRead)
def update_inventory_item_state(
    item_id: str,
    payload: schemas.InventoryItemStateUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    item = services.update_inventory_item_state(db, item_id=item_id, state=payload.state)
    db.commit()
    db.refresh(item)
    return item


@router.post(
    "/{item_id}/stock-counts",
    response_model=schemas.StockCountRead,
    status_code=status.HTTP_201_CREATED,
)
def record_stock_count(
    item_id: str,
    payload: schemas.StockCountCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    stock_count = services.record_stock_count(
        db,
        item_id=item_id,
        count=payload.count,
        count_date=payload.count_date,
        administrative=payload.administrative,
        acting_user=current_user,
    )
    db.commit()
    db.refresh(stock_count)
    return stock_count


@router.get("/{item_id}/stock-counts", response_model=List[schemas.StockCountRead])
def list_stock_counts(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_stock_counts(db, item_id=item_id)


@router.get("/{item_id}/quantity", response_model=schemas.InventoryQuantityRead)
def get_current_quantity(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    item = services.get_inventory_item(db, item_id)
    return schemas.InventoryQuantityRead(
        item_id=item.id,
        is_countable=item.is_countable,
        quantity=services.current_quantity(db, item),
    )
