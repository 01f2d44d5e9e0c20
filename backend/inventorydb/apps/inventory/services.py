from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from inventorydb.errors import ConstraintViolation, NotFound, PermissionDenied
from inventorydb.apps.accounts import models as account_models
from inventorydb.apps.catalog import models as catalog_models
from . import models

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_inventory_item(db: Session, item_id: str) -> models.InventoryItem:
    item = db.get(models.InventoryItem, item_id)
    if item is None:
        raise NotFound(f"Inventory item {item_id} not found.")
    return item


def list_items_at_location(db: Session, *, location_id: Optional[str]) -> List[models.InventoryItem]:
    """Items directly inside `location_id`; roots when it is None."""
    query = db.query(models.InventoryItem)
    if location_id is None:
        query = query.filter(models.InventoryItem.location_id.is_(None))
    else:
        get_inventory_item(db, location_id)
        query = query.filter(models.InventoryItem.location_id == location_id)
    return query.order_by(models.InventoryItem.created_at.asc()).all()


def location_path(db: Session, *, item_id: str) -> List[models.InventoryItem]:
    """Ancestors of an item, root first, excluding the item itself."""
    item = get_inventory_item(db, item_id)
    chain = _ancestor_chain(db, item.location_id, lock=False)
    chain.reverse()
    return chain


# ---------------------------------------------------------------------------
# Location tree
# ---------------------------------------------------------------------------


def _ancestor_chain(
    db: Session,
    location_id: Optional[str],
    *,
    lock: bool,
) -> List[models.InventoryItem]:
    """
    Walk `location_id` up to its root, nearest first.

    The walk is bounded by the number of items: a longer chain means the
    stored tree already contains a cycle. With `lock=True` each visited row
    is read FOR UPDATE so concurrent moves on the same chain serialise
    (ignored on SQLite, which serialises writers anyway).
    """
    limit = db.query(func.count(models.InventoryItem.id)).scalar() or 0
    chain: List[models.InventoryItem] = []
    current_id = location_id
    while current_id is not None:
        if len(chain) > limit:
            raise ConstraintViolation("Location tree already contains a cycle.")
        query = db.query(models.InventoryItem).filter(models.InventoryItem.id == current_id)
        if lock:
            query = query.with_for_update()
        node = query.first()
        if node is None:
            raise ConstraintViolation(f"Location {current_id} does not exist.")
        chain.append(node)
        current_id = node.location_id
    return chain


def _check_location(db: Session, *, item_id: Optional[str], location_id: Optional[str]) -> None:
    """Refuse a location that is missing, the item itself, or inside it."""
    if location_id is None:
        return
    if item_id is not None and location_id == item_id:
        raise ConstraintViolation("An item cannot be its own location.")
    for ancestor in _ancestor_chain(db, location_id, lock=True):
        if item_id is not None and ancestor.id == item_id:
            raise ConstraintViolation(
                "An item cannot be located inside an item it contains."
            )


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def create_inventory_item(
    db: Session,
    *,
    type_id: str,
    source_id: str,
    location_id: Optional[str] = None,
    state: models.InventoryItemState = models.InventoryItemState.OK,
    tag: Optional[str] = None,
    summary: Optional[str] = None,
    is_countable: bool = False,
    unit_price: Optional[int] = None,
    acquired_date: Optional[date] = None,
) -> models.InventoryItem:
    item_type = db.get(catalog_models.InventoryItemType, type_id)
    if item_type is None:
        raise ConstraintViolation(f"Item type {type_id} does not exist.")
    source = db.get(catalog_models.InventoryItemTypeSource, source_id)
    if source is None:
        raise ConstraintViolation(f"Source {source_id} does not exist.")
    if source.item_type_id != type_id:
        raise ConstraintViolation(
            f"Source {source_id} supplies a different item type."
        )
    if unit_price is not None and unit_price < 0:
        raise ConstraintViolation("unit_price must not be negative.")

    _check_location(db, item_id=None, location_id=location_id)

    item = models.InventoryItem(
        type_id=type_id,
        source_id=source_id,
        location_id=location_id,
        state=models.InventoryItemState(state),
        tag=tag,
        summary=summary,
        is_countable=is_countable,
        unit_price=unit_price if unit_price is not None else source.unit_price,
        acquired_date=acquired_date,
    )
    db.add(item)
    db.flush()
    logger.info("Created inventory item %s (type %s, location %s)", item.id, type_id, location_id)
    return item


def move_inventory_item(
    db: Session,
    *,
    item_id: str,
    location_id: Optional[str],
) -> models.InventoryItem:
    """
    Relocate an item, or make it a root when `location_id` is None.

    The moved row is locked before the target's ancestors. When two crossing
    moves deadlock, the one the database aborts raises ConstraintViolation.
    """
    item = (
        db.query(models.InventoryItem)
        .filter(models.InventoryItem.id == item_id)
        .with_for_update()
        .first()
    )
    if item is None:
        raise NotFound(f"Inventory item {item_id} not found.")
    try:
        _check_location(db, item_id=item.id, location_id=location_id)
    except ConstraintViolation as exc:
        logger.warning("Rejected move of item %s to %s: %s", item.id, location_id, exc.message)
        raise
    except OperationalError:
        db.rollback()
        logger.warning("Move of item %s to %s lost a lock race", item_id, location_id)
        raise ConstraintViolation(
            f"Location tree changed concurrently; item {item_id} was not moved."
        )

    previous = item.location_id
    item.location_id = location_id
    db.flush()
    logger.info("Moved inventory item %s from %s to %s", item.id, previous, location_id)
    return item


def update_inventory_item_state(
    db: Session,
    *,
    item_id: str,
    state: models.InventoryItemState,
) -> models.InventoryItem:
    item = get_inventory_item(db, item_id)
    item.state = models.InventoryItemState(state)
    db.flush()
    logger.info("Inventory item %s is now %s", item.id, item.state.value)
    return item


# ---------------------------------------------------------------------------
# Stock counts
# ---------------------------------------------------------------------------


def record_stock_count(
    db: Session,
    *,
    item_id: str,
    count: int,
    count_date: date,
    administrative: bool,
    acting_user: account_models.User,
) -> models.InventoryItemStockCount:
    """
    Record the on-hand quantity of an item for one calendar date.

    Administrative corrections are admin-only. At most one count exists per
    (item, date); the composite primary key backs the check below against
    concurrent writers.
    """
    role = account_models.PermissionRole(acting_user.permission_role)
    if administrative and not role.at_least(account_models.PermissionRole.ADMIN):
        logger.warning(
            "User %s (%s) attempted an administrative count on item %s",
            acting_user.id,
            role.value,
            item_id,
        )
        raise PermissionDenied("Only admins may record administrative stock counts.")

    if db.get(models.InventoryItem, item_id) is None:
        raise ConstraintViolation(f"Inventory item {item_id} does not exist.")
    if count is None or count < 0:
        raise ConstraintViolation("Stock count must not be negative.")

    if db.get(models.InventoryItemStockCount, (item_id, count_date)) is not None:
        logger.warning("Duplicate stock count for item %s on %s", item_id, count_date)
        raise ConstraintViolation(
            f"A stock count for item {item_id} on {count_date.isoformat()} already exists."
        )

    stock_count = models.InventoryItemStockCount(
        item_id=item_id,
        count=count,
        count_date=count_date,
        administrative=administrative,
        user_id=acting_user.id,
    )
    db.add(stock_count)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent duplicate stock count for item %s on %s", item_id, count_date)
        raise ConstraintViolation(
            f"A stock count for item {item_id} on {count_date.isoformat()} already exists."
        )

    logger.info(
        "Recorded %s stock count %s for item %s on %s by user %s",
        "administrative" if administrative else "physical",
        count,
        item_id,
        count_date,
        acting_user.id,
    )
    return stock_count


def list_stock_counts(db: Session, *, item_id: str) -> List[models.InventoryItemStockCount]:
    get_inventory_item(db, item_id)
    return (
        db.query(models.InventoryItemStockCount)
        .filter(models.InventoryItemStockCount.item_id == item_id)
        .order_by(models.InventoryItemStockCount.count_date.desc())
        .all()
    )


def current_quantity(db: Session, item: models.InventoryItem) -> Optional[int]:
    """
    On-hand quantity of an item.

    Non-countable items are always 1 and their count rows are ignored.
    Countable items take the count with the latest date, or None when the
    item has never been counted.
    """
    if not item.is_countable:
        return 1
    latest = (
        db.query(models.InventoryItemStockCount)
        .filter(models.InventoryItemStockCount.item_id == item.id)
        .order_by(models.InventoryItemStockCount.count_date.desc())
        .first()
    )
    if latest is None:
        return None
    return latest.count
