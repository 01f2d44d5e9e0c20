from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventorydb.errors import ConstraintViolation, NotFound
from . import models

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str], *, field: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ConstraintViolation(f"{field} must not be blank.")
    return cleaned


def _require_organisation(db: Session, organisation_id: str) -> models.Organisation:
    organisation = db.get(models.Organisation, organisation_id)
    if organisation is None:
        raise ConstraintViolation(f"Organisation {organisation_id} does not exist.")
    return organisation


def _require_item_type(db: Session, item_type_id: str) -> models.InventoryItemType:
    item_type = db.get(models.InventoryItemType, item_type_id)
    if item_type is None:
        raise ConstraintViolation(f"Item type {item_type_id} does not exist.")
    return item_type


def _check_unit_price(unit_price: Optional[int]) -> None:
    if unit_price is not None and unit_price < 0:
        raise ConstraintViolation("unit_price must not be negative.")


# ---------------------------------------------------------------------------
# Organisations
# ---------------------------------------------------------------------------


def create_organisation(db: Session, *, name: str) -> models.Organisation:
    organisation = models.Organisation(name=_clean_name(name, field="Organisation name"))
    db.add(organisation)
    db.flush()
    logger.info("Created organisation %s (%s)", organisation.id, organisation.name)
    return organisation


def rename_organisation(db: Session, *, organisation_id: str, name: str) -> models.Organisation:
    organisation = get_organisation(db, organisation_id)
    organisation.name = _clean_name(name, field="Organisation name")
    db.flush()
    return organisation


def get_organisation(db: Session, organisation_id: str) -> models.Organisation:
    organisation = db.get(models.Organisation, organisation_id)
    if organisation is None:
        raise NotFound(f"Organisation {organisation_id} not found.")
    return organisation


def list_organisations(db: Session) -> List[models.Organisation]:
    return db.query(models.Organisation).order_by(models.Organisation.name.asc()).all()


# ---------------------------------------------------------------------------
# Item types
# ---------------------------------------------------------------------------


def create_item_type(
    db: Session,
    *,
    consumable: bool = False,
    description: Optional[str] = None,
    manufacturer_id: Optional[str] = None,
) -> models.InventoryItemType:
    if manufacturer_id is not None:
        _require_organisation(db, manufacturer_id)
    item_type = models.InventoryItemType(
        consumable=consumable,
        description=description,
        manufacturer_id=manufacturer_id,
    )
    db.add(item_type)
    db.flush()
    logger.info("Created item type %s (%s)", item_type.id, description)
    return item_type


def get_item_type(db: Session, item_type_id: str) -> models.InventoryItemType:
    item_type = db.get(models.InventoryItemType, item_type_id)
    if item_type is None:
        raise NotFound(f"Item type {item_type_id} not found.")
    return item_type


def list_item_types(db: Session) -> List[models.InventoryItemType]:
    return (
        db.query(models.InventoryItemType)
        .order_by(models.InventoryItemType.description.asc())
        .all()
    )


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def create_item_type_source(
    db: Session,
    *,
    item_type_id: str,
    manufacturer_id: str,
    model_name: str,
    resupply_uri: Optional[str] = None,
    unit_price: Optional[int] = None,
    unit_price_date: Optional[date] = None,
) -> models.InventoryItemTypeSource:
    _require_item_type(db, item_type_id)
    _require_organisation(db, manufacturer_id)
    _check_unit_price(unit_price)

    source = models.InventoryItemTypeSource(
        item_type_id=item_type_id,
        manufacturer_id=manufacturer_id,
        model_name=_clean_name(model_name, field="model_name"),
        resupply_uri=resupply_uri,
        unit_price=unit_price,
        unit_price_date=unit_price_date,
    )
    db.add(source)
    db.flush()
    logger.info("Created source %s for item type %s", source.id, item_type_id)
    return source


def get_item_type_source(db: Session, source_id: str) -> models.InventoryItemTypeSource:
    source = db.get(models.InventoryItemTypeSource, source_id)
    if source is None:
        raise NotFound(f"Source {source_id} not found.")
    return source


def reprice_item_type_source(
    db: Session,
    *,
    source_id: str,
    unit_price: int,
    unit_price_date: Optional[date] = None,
) -> models.InventoryItemTypeSource:
    """
    Record a new price for a supply channel.

    Sources already referenced by items are never edited in place; the new
    price goes on a fresh row copying the channel fields.
    """
    previous = get_item_type_source(db, source_id)
    _check_unit_price(unit_price)

    source = models.InventoryItemTypeSource(
        item_type_id=previous.item_type_id,
        manufacturer_id=previous.manufacturer_id,
        model_name=previous.model_name,
        resupply_uri=previous.resupply_uri,
        unit_price=unit_price,
        unit_price_date=unit_price_date or date.today(),
    )
    db.add(source)
    db.flush()
    logger.info("Repriced source %s as %s (unit_price=%s)", previous.id, source.id, unit_price)
    return source


def list_item_type_sources(db: Session, *, item_type_id: str) -> List[models.InventoryItemTypeSource]:
    get_item_type(db, item_type_id)
    return (
        db.query(models.InventoryItemTypeSource)
        .filter(models.InventoryItemTypeSource.item_type_id == item_type_id)
        .order_by(models.InventoryItemTypeSource.created_at.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# Bill of materials
# ---------------------------------------------------------------------------


def upsert_bom_item(
    db: Session,
    *,
    item_type_id: str,
    ingredient_type_id: str,
    quantity: int,
    reclaimable: bool = False,
) -> models.BomItem:
    """
    Create or update the single BOM edge for (item_type, ingredient_type).
    """
    if item_type_id == ingredient_type_id:
        logger.warning("Rejected BOM self-loop on item type %s", item_type_id)
        raise ConstraintViolation("An item type cannot be its own ingredient.")
    if quantity is None or quantity <= 0:
        raise ConstraintViolation("BOM quantity must be greater than zero.")
    _require_item_type(db, item_type_id)
    _require_item_type(db, ingredient_type_id)

    bom_item = db.get(models.BomItem, (item_type_id, ingredient_type_id))
    if bom_item is None:
        bom_item = models.BomItem(
            item_type_id=item_type_id,
            ingredient_type_id=ingredient_type_id,
            quantity=quantity,
            reclaimable=reclaimable,
        )
        db.add(bom_item)
    else:
        bom_item.quantity = quantity
        bom_item.reclaimable = reclaimable

    try:
        db.flush()
    except IntegrityError:
        # a concurrent writer inserted the same pair first
        db.rollback()
        raise ConstraintViolation(
            f"A BOM edge for {item_type_id} <- {ingredient_type_id} already exists."
        )

    logger.info(
        "Upserted BOM edge %s <- %s x%s (reclaimable=%s)",
        item_type_id,
        ingredient_type_id,
        quantity,
        reclaimable,
    )
    return bom_item


def list_bom(db: Session, *, item_type_id: str) -> List[models.BomItem]:
    """Ingredients consumed to produce one unit of the item type."""
    get_item_type(db, item_type_id)
    return (
        db.query(models.BomItem)
        .filter(models.BomItem.item_type_id == item_type_id)
        .order_by(models.BomItem.ingredient_type_id.asc())
        .all()
    )


def list_used_in(db: Session, *, ingredient_type_id: str) -> List[models.BomItem]:
    """Item types whose BOM consumes the given ingredient."""
    get_item_type(db, ingredient_type_id)
    return (
        db.query(models.BomItem)
        .filter(models.BomItem.ingredient_type_id == ingredient_type_id)
        .order_by(models.BomItem.item_type_id.asc())
        .all()
    )
