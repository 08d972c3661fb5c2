from decimal import Decimal

import pytest

from conftest import SUPPLIER_ID, VENDOR_ID
from marketplace.buisness.carts.cart_store import CartLineSnapshot, CartStore
from marketplace.buisness.inventory import CatalogGateway, InventoryReservationService
from marketplace.data.carts.cart import Cart
from marketplace.data.catalog.inventory_movement import InventoryMovement
from marketplace.errors import NotFound, ValidationError


def test_snapshot_captures_current_price(make_item):
    item = make_item(name='Toor Dal 10kg', price='85.50', quantity=4)
    snapshot = CatalogGateway().get_snapshot(item.id)
    assert snapshot.price == Decimal('85.50')
    assert snapshot.supplier_id == SUPPLIER_ID
    assert snapshot.quantity_available == 4


def test_missing_items_are_reported(make_item):
    item = make_item()
    with pytest.raises(NotFound):
        CatalogGateway().get_snapshot(404)
    with pytest.raises(NotFound) as excinfo:
        CatalogGateway().get_snapshots([item.id, 404, 405])
    assert excinfo.value.details['missing_inventory_item_ids'] == [404, 405]


def test_readding_an_item_updates_the_line(db, make_item, fill_cart):
    item = make_item()
    fill_cart([(item, 2)])
    fill_cart([(item, 5)])

    assert CartStore().get_lines(VENDOR_ID) == [CartLineSnapshot(item.id, 5)]


def test_clear_empties_but_keeps_cart(db, make_item, fill_cart):
    fill_cart([(make_item(), 1)])
    CartStore().clear(VENDOR_ID)
    db.session.commit()

    cart = Cart.query.filter_by(vendor_id=VENDOR_ID).one()
    assert cart.is_empty


def test_cart_quantity_must_be_positive(db, make_item):
    with pytest.raises(ValidationError):
        CartStore().set_line(VENDOR_ID, make_item().id, 0)


def test_movement_kinds(db, make_item):
    item = make_item(quantity=5)
    service = InventoryReservationService()
    reserve = service.reserve(item.id, 2)
    release = service.release(item.id, 2)
    db.session.commit()
    assert reserve.is_reservation and not reserve.is_release
    assert release.is_release and not release.is_reservation
    assert [m.quantity_after for m in InventoryMovement.query.order_by(InventoryMovement.id)] == [3, 5]
