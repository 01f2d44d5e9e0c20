from __future__ import annotations

import logging
from datetime import date

from inventorydb.database import SessionLocal
from inventorydb.logging_config import configure_logging
from inventorydb.apps.accounts import models as account_models
from inventorydb.apps.accounts import services as account_services
from inventorydb.apps.catalog import models as catalog_models
from inventorydb.apps.catalog import services as catalog_services
from inventorydb.apps.inventory import models as inventory_models
from inventorydb.apps.inventory import services as inventory_services

logger = logging.getLogger("seed_demo")

DEMO_ADMIN_USERNAME = "demo-admin"
DEMO_ADMIN_PASSWORD = "ChangeMe123!"


def _get_or_create_admin(db) -> account_models.User:
    user = account_services.get_user_by_username(db, DEMO_ADMIN_USERNAME)
    if user:
        return user
    user = account_services.create_user(
        db,
        username=DEMO_ADMIN_USERNAME,
        password=DEMO_ADMIN_PASSWORD,
        permission_role=account_models.PermissionRole.ADMIN,
    )
    db.commit()
    return user


def _get_or_create_organisation(db, name: str) -> catalog_models.Organisation:
    organisation = (
        db.query(catalog_models.Organisation)
        .filter(catalog_models.Organisation.name == name)
        .first()
    )
    if organisation:
        return organisation
    organisation = catalog_services.create_organisation(db, name=name)
    db.commit()
    return organisation


def _get_or_create_type(
    db,
    description: str,
    manufacturer: catalog_models.Organisation,
    *,
    consumable: bool = False,
) -> catalog_models.InventoryItemType:
    item_type = (
        db.query(catalog_models.InventoryItemType)
        .filter(catalog_models.InventoryItemType.description == description)
        .first()
    )
    if item_type:
        return item_type
    item_type = catalog_services.create_item_type(
        db,
        description=description,
        manufacturer_id=manufacturer.id,
        consumable=consumable,
    )
    db.commit()
    return item_type


def _get_or_create_source(
    db,
    item_type: catalog_models.InventoryItemType,
    manufacturer: catalog_models.Organisation,
    model_name: str,
    unit_price: int,
) -> catalog_models.InventoryItemTypeSource:
    source = (
        db.query(catalog_models.InventoryItemTypeSource)
        .filter(
            catalog_models.InventoryItemTypeSource.item_type_id == item_type.id,
            catalog_models.InventoryItemTypeSource.model_name == model_name,
        )
        .first()
    )
    if source:
        return source
    source = catalog_services.create_item_type_source(
        db,
        item_type_id=item_type.id,
        manufacturer_id=manufacturer.id,
        model_name=model_name,
        unit_price=unit_price,
        unit_price_date=date.today(),
    )
    db.commit()
    return source


def _get_or_create_item(
    db,
    tag: str,
    source: catalog_models.InventoryItemTypeSource,
    *,
    location: inventory_models.InventoryItem | None = None,
    is_countable: bool = False,
) -> inventory_models.InventoryItem:
    item = db.query(inventory_models.InventoryItem).filter(inventory_models.InventoryItem.tag == tag).first()
    if item:
        return item
    item = inventory_services.create_inventory_item(
        db,
        type_id=source.item_type_id,
        source_id=source.id,
        location_id=location.id if location else None,
        tag=tag,
        is_countable=is_countable,
    )
    db.commit()
    return item


def _seed_workshop(db, admin: account_models.User) -> None:
    acme = _get_or_create_organisation(db, "Acme Fixings")
    shelving = _get_or_create_organisation(db, "Shelving Co")

    rack_type = _get_or_create_type(db, "Steel shelving rack", shelving)
    bin_type = _get_or_create_type(db, "Parts bin", shelving)
    screw_type = _get_or_create_type(db, "10mm Torx T25 screw", acme, consumable=True)

    catalog_services.upsert_bom_item(
        db,
        item_type_id=rack_type.id,
        ingredient_type_id=screw_type.id,
        quantity=24,
        reclaimable=True,
    )
    db.commit()

    rack_source = _get_or_create_source(db, rack_type, shelving, "SR-1800", 12900)
    bin_source = _get_or_create_source(db, bin_type, shelving, "PB-30", 450)
    screw_source = _get_or_create_source(db, screw_type, acme, "T25-10", 4)

    rack = _get_or_create_item(db, "RACK-01", rack_source)
    bin_ = _get_or_create_item(db, "BIN-01", bin_source, location=rack)
    screws = _get_or_create_item(db, "SCREWS-T25", screw_source, location=bin_, is_countable=True)

    today = date.today()
    if db.get(inventory_models.InventoryItemStockCount, (screws.id, today)) is None:
        inventory_services.record_stock_count(
            db,
            item_id=screws.id,
            count=250,
            count_date=today,
            administrative=False,
            acting_user=admin,
        )
        db.commit()


def main() -> None:
    configure_logging()
    db = SessionLocal()
    try:
        admin = _get_or_create_admin(db)
        _seed_workshop(db, admin)
        logger.info("Demo inventory seeded; log in as %s", DEMO_ADMIN_USERNAME)
    finally:
        db.close()


if __name__ == "__main__":
    main()
