from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventorydb.database import get_db
from inventorydb.security import require_role
from inventorydb.apps.accounts import models as account_models

from . import schemas, services

router = APIRouter(prefix="", tags=["catalog"])

READ_ROLE = require_role(account_models.PermissionRole.VIEWER)
WRITE_ROLE = require_role(account_models.PermissionRole.EDITOR)


# ---------------------------------------------------------------------------
# Organisations
# ---------------------------------------------------------------------------


@router.post(
    "/organisations",
    response_model=schemas.OrganisationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_organisation(
    payload: schemas.OrganisationCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    organisation = services.create_organisation(db, name=payload.name)
    db.commit()
    db.refresh(organisation)
    return organisation


@router.get("/organisations", response_model=List[schemas.OrganisationRead])
def list_organisations(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_organisations(db)


@router.patch("/organisations/{organisation_id}", response_model=schemas.OrganisationRead)
def rename_organisation(
    organisation_id: str,
    payload: schemas.OrganisationUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    organisation = services.rename_organisation(db, organisation_id=organisation_id, name=payload.name)
    db.commit()
    db.refresh(organisation)
    return organisation


# ---------------------------------------------------------------------------
# Item types + sources
# ---------------------------------------------------------------------------


@router.post(
    "/item-types",
    response_model=schemas.InventoryItemTypeRead,
    status_code=status.HTTP_201_CREATED,
)
def create_item_type(
    payload: schemas.InventoryItemTypeCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    item_type = services.create_item_type(
        db,
        consumable=payload.consumable,
        description=payload.description,
        manufacturer_id=payload.manufacturer_id,
    )
    db.commit()
    db.refresh(item_type)
    return item_type


@router.get("/item-types", response_model=List[schemas.InventoryItemTypeRead])
def list_item_types(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_item_types(db)


@router.get("/item-types/{item_type_id}", response_model=schemas.InventoryItemTypeRead)
def get_item_type(
    item_type_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.get_item_type(db, item_type_id)


@router.post(
    "/item-types/{item_type_id}/sources",
    response_model=schemas.InventoryItemTypeSourceRead,
    status_code=status.HTTP_201_CREATED,
)
def create_item_type_source(
    item_type_id: str,
    payload: schemas.InventoryItemTypeSourceCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    source = services.create_item_type_source(
        db,
        item_type_id=item_type_id,
        manufacturer_id=payload.manufacturer_id,
        model_name=payload.model_name,
        resupply_uri=payload.resupply_uri,
        unit_price=payload.unit_price,
        unit_price_date=payload.unit_price_date,
    )
    db.commit()
    db.refresh(source)
    return source


@router.get(
    "/item-types/{item_type_id}/sources",
    response_model=List[schemas.InventoryItemTypeSourceRead],
)
def list_item_type_sources(
    item_type_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_item_type_sources(db, item_type_id=item_type_id)


@router.post(
    "/sources/{source_id}/reprice",
    response_model=schemas.InventoryItemTypeSourceRead,
    status_code=status.HTTP_201_CREATED,
)
def reprice_item_type_source(
    source_id: str,
    payload: schemas.SourceReprice,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    source = services.reprice_item_type_source(
        db,
        source_id=source_id,
        unit_price=payload.unit_price,
        unit_price_date=payload.unit_price_date,
    )
    db.commit()
    db.refresh(source)
    return source


# ---------------------------------------------------------------------------
# Bill of materials
# ---------------------------------------------------------------------------


@router.put(
    "/item-types/{item_type_id}/bom/{ingredient_type_id}",
    response_model=schemas.BomItemRead,
)
def upsert_bom_item(
    item_type_id: str,
    ingredient_type_id: str,
    payload: schemas.BomItemUpsert,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(WRITE_ROLE),
):
    bom_item = services.upsert_bom_item(
        db,
        item_type_id=item_type_id,
        ingredient_type_id=ingredient_type_id,
        quantity=payload.quantity,
        reclaimable=payload.reclaimable,
    )
    db.commit()
    db.refresh(bom_item)
    return bom_item


@router.get("/item-types/{item_type_id}/bom", response_model=List[schemas.BomItemRead])
def list_bom(
    item_type_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_bom(db, item_type_id=item_type_id)


@router.get("/item-types/{item_type_id}/used-in", response_model=List[schemas.BomItemRead])
def list_used_in(
    item_type_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(READ_ROLE),
):
    return services.list_used_in(db, ingredient_type_id=item_type_id)
