"""
Build and demo data tests
"""
from marketplace.build import build_database
from marketplace.buisness.carts.cart_store import CartStore
from marketplace.buisness.orders import OrderSplitter
from marketplace.data.catalog.inventory_item import InventoryItem


def test_build_without_demo_data(app):
    assert build_database(enable_debug_data=False) == {}
    assert InventoryItem.query.count() == 0


def test_build_with_demo_data_is_idempotent(app):
    summary = build_database(enable_debug_data=True)
    assert summary['status'] == 'inserted'
    assert summary['items'] == InventoryItem.query.count() == 5
    assert summary['cart_lines'] == 4

    again = build_database(enable_debug_data=True)
    assert again == {'status': 'skipped', 'reason': 'data_present'}
    assert InventoryItem.query.count() == 5


def test_demo_cart_checks_out(app):
    build_database(enable_debug_data=True)
    assert len(CartStore().get_lines(201)) == 2

    result = OrderSplitter().checkout(vendor_id=201)

    # Rice (supplier 101) 2 x 100 and oil (supplier 102) 1 x 50
    assert sorted(float(order.total_amount) for order in result.orders) == [59.0, 236.0]
    out_of_stock = InventoryItem.query.filter_by(name='Jaggery 5kg').one()
    assert out_of_stock.out_of_stock is True
    assert not out_of_stock.is_available
