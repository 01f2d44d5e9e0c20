from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from inventorydb.database import Base
from inventorydb.ids import new_id

# Tables referenced by foreign keys below must be registered on Base.metadata.
from inventorydb.apps.accounts import models as account_models  # noqa: F401
from inventorydb.apps.catalog import models as catalog_models  # noqa: F401


def _utcnow() -> datetime:
    return datetime.utcnow()


class InventoryItemState(str, enum.Enum):
    OK = "ok"
    DAMAGED = "damaged"
    LOST = "lost"
    ORPHANED = "orphaned"


class InventoryItem(Base):
    """
    A physical unit of inventory.

    Locations are items too: a shelf is an item that other items sit "in",
    so `location_id` points back into this table and items form a forest.
    Roots have no location. The foreign key cannot express acyclicity; the
    inventory services walk the ancestor chain before every relocation.

    Countable items (screws and the like) take their quantity from the most
    recent stock count. Anything with real value, or whose exact quantity
    matters, should not be countable and is assumed to have a quantity of 1.
    """

    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint(
            "location_id IS NULL OR location_id <> id",
            name="ck_inventory_items_not_own_location",
        ),
        Index("ix_inventory_items_location", "location_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    tag = Column(String(64), nullable=True, index=True)
    type_id = Column(
        String(36),
        ForeignKey("inventory_item_types.id"),
        nullable=False,
        index=True,
    )
    source_id = Column(
        String(36),
        ForeignKey("inventory_item_type_sources.id"),
        nullable=False,
        index=True,
    )
    location_id = Column(String(36), ForeignKey("inventory_items.id"), nullable=True)
    state = Column(
        SAEnum(
            InventoryItemState,
            name="inventory_item_state",
            values_callable=lambda states: [s.value for s in states],
        ),
        nullable=False,
        default=InventoryItemState.OK,
        index=True,
    )
    summary = Column(String(1024), nullable=True)
    is_countable = Column(Boolean, nullable=False, default=False)
    # most recent unit price, minor currency units
    unit_price = Column(Integer, nullable=True)
    acquired_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    item_type = relationship("InventoryItemType", lazy="joined")
    source = relationship("InventoryItemTypeSource", lazy="joined")
    location = relationship("InventoryItem", remote_side=[id], lazy="select")

    def __repr__(self) -> str:
        return f"<InventoryItem {self.id} tag={self.tag!r}>"


class InventoryItemStockCount(Base):
    """
    One stock count of an item, entered by one user.

    The most recent count is taken as the current quantity. Administrative
    counts adjust the quantity without a physical count (miscounts, clerical
    errors, moves where nobody counted) and may only be entered by admins;
    where stock figures are declared to an outside body they form part of
    the legal record, so physical counts are preferred.

    Rows for items that are not countable are ignored.
    """

    __tablename__ = "inventory_item_stock_counts"
    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_stock_counts_count_non_negative"),
        Index("ix_stock_counts_user", "user_id"),
    )

    item_id = Column(String(36), ForeignKey("inventory_items.id"), primary_key=True)
    count_date = Column(Date, primary_key=True)
    count = Column(Integer, nullable=False)
    administrative = Column(Boolean, nullable=False, default=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    item = relationship("InventoryItem", lazy="joined")
    user = relationship("User", lazy="joined")
