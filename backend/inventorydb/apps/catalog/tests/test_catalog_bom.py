from __future__ import annotations

from datetime import date

import pytest

from inventorydb.errors import ConstraintViolation, NotFound
from inventorydb.apps.accounts.models import PermissionRole
from inventorydb.apps.catalog import models, router, schemas, services


def _create_type(db, description: str, **kwargs) -> models.InventoryItemType:
    item_type = services.create_item_type(db, description=description, **kwargs)
    db.commit()
    return item_type


def test_item_type_manufacturer_must_exist(db_session):
    with pytest.raises(ConstraintViolation):
        services.create_item_type(db_session, description="Widget", manufacturer_id="missing")

    acme = services.create_organisation(db_session, name="Acme")
    widget = services.create_item_type(db_session, description="Widget", manufacturer_id=acme.id)
    db_session.commit()

    assert widget.manufacturer.name == "Acme"


def test_organisation_name_is_mutable_but_not_blank(db_session):
    acme = services.create_organisation(db_session, name="Acme")
    db_session.commit()

    services.rename_organisation(db_session, organisation_id=acme.id, name="Acme Ltd")
    assert services.get_organisation(db_session, acme.id).name == "Acme Ltd"

    with pytest.raises(ConstraintViolation):
        services.rename_organisation(db_session, organisation_id=acme.id, name="  ")
    with pytest.raises(NotFound):
        services.get_organisation(db_session, "missing")


def test_bom_rejects_self_loop(db_session):
    screw = _create_type(db_session, "10mm Torx T25 screw")

    with pytest.raises(ConstraintViolation):
        services.upsert_bom_item(
            db_session,
            item_type_id=screw.id,
            ingredient_type_id=screw.id,
            quantity=1,
        )
    assert db_session.query(models.BomItem).count() == 0


@pytest.mark.parametrize("quantity", [0, -3])
def test_bom_rejects_non_positive_quantity(db_session, quantity):
    frame = _create_type(db_session, "Frame")
    screw = _create_type(db_session, "Screw")

    with pytest.raises(ConstraintViolation):
        services.upsert_bom_item(
            db_session,
            item_type_id=frame.id,
            ingredient_type_id=screw.id,
            quantity=quantity,
        )


def test_bom_rejects_unknown_types(db_session):
    frame = _create_type(db_session, "Frame")

    with pytest.raises(ConstraintViolation):
        services.upsert_bom_item(
            db_session,
            item_type_id=frame.id,
            ingredient_type_id="missing",
            quantity=2,
        )


def test_bom_upsert_keeps_one_edge_per_pair(db_session):
    frame = _create_type(db_session, "Frame")
    screw = _create_type(db_session, "Screw")

    services.upsert_bom_item(
        db_session,
        item_type_id=frame.id,
        ingredient_type_id=screw.id,
        quantity=4,
    )
    db_session.commit()
    services.upsert_bom_item(
        db_session,
        item_type_id=frame.id,
        ingredient_type_id=screw.id,
        quantity=6,
        reclaimable=True,
    )
    db_session.commit()

    edges = services.list_bom(db_session, item_type_id=frame.id)
    assert len(edges) == 1
    assert edges[0].quantity == 6
    assert edges[0].reclaimable is True


def test_bom_direction_matters(db_session):
    frame = _create_type(db_session, "Frame")
    screw = _create_type(db_session, "Screw")
    panel = _create_type(db_session, "Panel")

    services.upsert_bom_item(db_session, item_type_id=frame.id, ingredient_type_id=screw.id, quantity=4)
    services.upsert_bom_item(db_session, item_type_id=panel.id, ingredient_type_id=screw.id, quantity=2)
    db_session.commit()

    assert [e.ingredient_type_id for e in services.list_bom(db_session, item_type_id=frame.id)] == [screw.id]
    assert services.list_bom(db_session, item_type_id=screw.id) == []
    used_in = {e.item_type_id for e in services.list_used_in(db_session, ingredient_type_id=screw.id)}
    assert used_in == {frame.id, panel.id}


def test_sources_are_append_only_on_reprice(db_session):
    acme = services.create_organisation(db_session, name="Acme")
    screw = _create_type(db_session, "Screw")
    original = services.create_item_type_source(
        db_session,
        item_type_id=screw.id,
        manufacturer_id=acme.id,
        model_name="T25-10",
        resupply_uri="https://example.com/t25",
        unit_price=12,
        unit_price_date=date(2024, 1, 1),
    )
    db_session.commit()

    repriced = services.reprice_item_type_source(
        db_session,
        source_id=original.id,
        unit_price=15,
        unit_price_date=date(2024, 6, 1),
    )
    db_session.commit()

    assert repriced.id != original.id
    assert repriced.model_name == "T25-10"
    assert repriced.resupply_uri == "https://example.com/t25"
    assert services.get_item_type_source(db_session, original.id).unit_price == 12
    prices = {s.unit_price for s in services.list_item_type_sources(db_session, item_type_id=screw.id)}
    assert prices == {12, 15}


def test_source_requires_existing_organisation_and_non_negative_price(db_session):
    acme = services.create_organisation(db_session, name="Acme")
    screw = _create_type(db_session, "Screw")

    with pytest.raises(ConstraintViolation):
        services.create_item_type_source(
            db_session,
            item_type_id=screw.id,
            manufacturer_id="missing",
            model_name="T25-10",
        )
    with pytest.raises(ConstraintViolation):
        services.create_item_type_source(
            db_session,
            item_type_id=screw.id,
            manufacturer_id=acme.id,
            model_name="T25-10",
            unit_price=-1,
        )


def test_bom_insert_racing_an_existing_edge_is_a_constraint_violation(db_session, monkeypatch):
    frame = _create_type(db_session, "Frame")
    screw = _create_type(db_session, "Screw")
    services.upsert_bom_item(db_session, item_type_id=frame.id, ingredient_type_id=screw.id, quantity=4)
    db_session.commit()
    db_session.expunge_all()

    # A stale read misses the committed edge, so the insert hits the primary key.
    real_get = db_session.get

    def stale_get(entity, ident, *args, **kwargs):
        if entity is models.BomItem:
            return None
        return real_get(entity, ident, *args, **kwargs)

    monkeypatch.setattr(db_session, "get", stale_get)

    with pytest.raises(ConstraintViolation) as excinfo:
        services.upsert_bom_item(db_session, item_type_id=frame.id, ingredient_type_id=screw.id, quantity=6)

    assert "already exists" in excinfo.value.message
    monkeypatch.undo()
    edges = services.list_bom(db_session, item_type_id=frame.id)
    assert [e.quantity for e in edges] == [4]


@pytest.mark.parametrize("quantity", [0, -1])
def test_bom_route_reports_bad_quantity_as_constraint_violation(db_session, make_user, quantity):
    editor = make_user("editor", role=PermissionRole.EDITOR)
    frame = _create_type(db_session, "Frame")
    screw = _create_type(db_session, "Screw")

    with pytest.raises(ConstraintViolation):
        router.upsert_bom_item(
            item_type_id=frame.id,
            ingredient_type_id=screw.id,
            payload=schemas.BomItemUpsert(quantity=quantity),
            db=db_session,
            current_user=editor,
        )


def test_negative_price_reaches_the_service(db_session):
    acme = services.create_organisation(db_session, name="Acme")
    screw = _create_type(db_session, "Screw")
    payload = schemas.InventoryItemTypeSourceCreate(
        manufacturer_id=acme.id,
        model_name="T25-10",
        unit_price=-5,
    )

    with pytest.raises(ConstraintViolation):
        services.create_item_type_source(db_session, item_type_id=screw.id, **payload.model_dump())
