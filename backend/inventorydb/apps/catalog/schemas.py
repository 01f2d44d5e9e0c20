from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class OrganisationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class OrganisationUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class OrganisationRead(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class InventoryItemTypeCreate(BaseModel):
    consumable: bool = False
    description: Optional[str] = None
    manufacturer_id: Optional[str] = None


class InventoryItemTypeRead(InventoryItemTypeCreate):
    id: str

    class Config:
        from_attributes = True


class InventoryItemTypeSourceCreate(BaseModel):
    manufacturer_id: str
    model_name: str = Field(..., min_length=1, max_length=255)
    resupply_uri: Optional[str] = None
    unit_price: Optional[int] = None
    unit_price_date: Optional[date] = None


class InventoryItemTypeSourceRead(InventoryItemTypeSourceCreate):
    id: str
    item_type_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class SourceReprice(BaseModel):
    unit_price: int
    unit_price_date: Optional[date] = None


class BomItemUpsert(BaseModel):
    quantity: int
    reclaimable: bool = False


class BomItemRead(BaseModel):
    item_type_id: str
    ingredient_type_id: str
    quantity: int
    reclaimable: bool

    class Config:
        from_attributes = True
