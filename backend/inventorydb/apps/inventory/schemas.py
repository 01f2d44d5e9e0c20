from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from . import models


class InventoryItemCreate(BaseModel):
    type_id: str
    source_id: str
    location_id: Optional[str] = None
    state: models.InventoryItemState = models.InventoryItemState.OK
    tag: Optional[str] = None
    summary: Optional[str] = None
    is_countable: bool = False
    unit_price: Optional[int] = None
    acquired_date: Optional[date] = None


class InventoryItemRead(BaseModel):
    id: str
    type_id: str
    source_id: str
    location_id: Optional[str] = None
    state: models.InventoryItemState
    tag: Optional[str] = None
    summary: Optional[str] = None
    is_countable: bool
    unit_price: Optional[int] = None
    acquired_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryItemMove(BaseModel):
    location_id: Optional[str] = None


class InventoryItemStateUpdate(BaseModel):
    state: models.InventoryItemState


class StockCountCreate(BaseModel):
    count: int
    count_date: date
    administrative: bool = False


class StockCountRead(BaseModel):
    item_id: str
    count: int
    count_date: date
    administrative: bool
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryQuantityRead(BaseModel):
    item_id: str
    is_countable: bool
    # None when a countable item has never been counted
    quantity: Optional[int] = None
