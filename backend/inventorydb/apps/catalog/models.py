from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from inventorydb.database import Base
from inventorydb.ids import new_id


def _utcnow() -> datetime:
    return datetime.utcnow()


class Organisation(Base):
    """An external entity that can be a manufacturer or owner of things."""

    __tablename__ = "organisations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Organisation {self.name}>"


class InventoryItemType(Base):
    """A category of inventoriable thing, e.g. "10mm Torx T25 screw"."""

    __tablename__ = "inventory_item_types"

    id = Column(String(36), primary_key=True, default=new_id)
    consumable = Column(Boolean, nullable=False, default=False)
    description = Column(String(255), nullable=True)
    manufacturer_id = Column(
        String(36),
        ForeignKey("organisations.id"),
        nullable=True,
        index=True,
    )

    manufacturer = relationship("Organisation", lazy="joined")
    sources = relationship(
        "InventoryItemTypeSource",
        back_populates="item_type",
        order_by="InventoryItemTypeSource.created_at.desc()",
    )
    bom_items = relationship(
        "BomItem",
        foreign_keys="BomItem.item_type_id",
        back_populates="item_type",
    )
    used_in = relationship(
        "BomItem",
        foreign_keys="BomItem.ingredient_type_id",
        back_populates="ingredient_type",
    )

    def __repr__(self) -> str:
        return f"<InventoryItemType {self.id} {self.description!r}>"


class InventoryItemTypeSource(Base):
    """
    A place we can get an item type from, plus that place's reference for it.

    If "10mm Torx T25 screw" is available from three manufacturers there is
    one item type and three sources attached to it. The unit price lives here
    too. Rows are append-only: a price change is a new row, so items keep
    pointing at the source (and price) they were actually acquired from.
    """

    __tablename__ = "inventory_item_type_sources"
    __table_args__ = (
        CheckConstraint(
            "unit_price IS NULL OR unit_price >= 0",
            name="ck_item_type_sources_unit_price_non_negative",
        ),
        Index("ix_item_type_sources_type_created", "item_type_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    item_type_id = Column(
        String(36),
        ForeignKey("inventory_item_types.id"),
        nullable=False,
        index=True,
    )
    manufacturer_id = Column(
        String(36),
        ForeignKey("organisations.id"),
        nullable=False,
        index=True,
    )
    model_name = Column(String(255), nullable=False)
    resupply_uri = Column(String(2048), nullable=True)
    # minor currency units
    unit_price = Column(Integer, nullable=True)
    unit_price_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    item_type = relationship("InventoryItemType", back_populates="sources", lazy="joined")
    manufacturer = relationship("Organisation", lazy="joined")


class BomItem(Base):
    """
    Bill-of-materials edge: producing one `item_type` consumes `quantity`
    units of `ingredient_type`.

    At most one edge per ordered pair (composite key). Self-loops are refused
    by the check constraint; multi-hop cycles are left to data quality.
    """

    __tablename__ = "bom_items"
    __table_args__ = (
        CheckConstraint(
            "item_type_id <> ingredient_type_id",
            name="ck_bom_items_no_self_loop",
        ),
        CheckConstraint("quantity > 0", name="ck_bom_items_quantity_positive"),
        Index("ix_bom_items_ingredient", "ingredient_type_id"),
    )

    item_type_id = Column(
        String(36),
        ForeignKey("inventory_item_types.id"),
        primary_key=True,
    )
    ingredient_type_id = Column(
        String(36),
        ForeignKey("inventory_item_types.id"),
        primary_key=True,
    )
    quantity = Column(Integer, nullable=False)
    # whether the ingredient is reusable if the item is disassembled
    reclaimable = Column(Boolean, nullable=False, default=False)

    item_type = relationship(
        "InventoryItemType",
        foreign_keys=[item_type_id],
        back_populates="bom_items",
    )
    ingredient_type = relationship(
        "InventoryItemType",
        foreign_keys=[ingredient_type_id],
        back_populates="used_in",
    )
