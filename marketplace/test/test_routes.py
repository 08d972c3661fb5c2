"""
HTTP-level tests: identity headers, role guards, JSON error shape and the
end-to-end marketplace flow through the blueprints.
"""
import pytest

from conftest import OTHER_SUPPLIER_ID, OTHER_VENDOR_ID, PARTNER_ID, SUPPLIER_ID, VENDOR_ID, auth_headers
from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.data.orders.order import Order
from marketplace.errors import ValidationError
from marketplace.presentation.routes.parsing import required_int


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok', 'database': 'ok'}


def test_missing_identity_is_unauthorized(client):
    response = client.post('/orders', json={'orderType': 'pickup'})
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'Unauthorized'


@pytest.mark.parametrize('headers', [
    {'X-User-Id': 'abc', 'X-User-Role': 'vendor'},
    {'X-User-Id': '5', 'X-User-Role': 'wizard'},
])
def test_malformed_identity_is_unauthorized(client, headers):
    assert client.get('/orders/vendor/history', headers=headers).status_code == 401


def test_wrong_role_is_forbidden(client, supplier_headers):
    response = client.post('/orders', json={'orderType': 'pickup'}, headers=supplier_headers)
    assert response.status_code == 403
    assert response.get_json()['error']['code'] == 'Forbidden'


def test_checkout_with_empty_cart(client, vendor_headers):
    response = client.post('/orders', json={'orderType': 'pickup'}, headers=vendor_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'EmptyCart'


def test_checkout_insufficient_stock_error_shape(client, make_item, fill_cart, vendor_headers):
    item = make_item(name='Sunflower Oil 15L', quantity=1)
    fill_cart([(item, 4)])

    response = client.post('/orders', json={}, headers=vendor_headers)

    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['code'] == 'InsufficientStock'
    assert error['message'] == 'Insufficient stock for Sunflower Oil 15L. Available: 1, Requested: 4'
    assert error['details']['available'] == 1
    assert error['details']['requested'] == 4


def test_checkout_creates_orders(client, make_item, fill_cart, vendor_headers):
    item_x = make_item(name='Item X', price='100', quantity=10, supplier_id=SUPPLIER_ID)
    item_y = make_item(name='Item Y', price='50', quantity=10, supplier_id=OTHER_SUPPLIER_ID)
    fill_cart([(item_x, 2), (item_y, 1)])

    response = client.post('/orders', json={'orderType': 'pickup'}, headers=vendor_headers)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['totalValue'] == 295.0
    totals = sorted(order['total_amount'] for order in data['orders'])
    assert totals == [59.0, 236.0]
    first = next(order for order in data['orders'] if order['supplier_id'] == SUPPLIER_ID)
    assert first['tax'] == {'cgst': 18.0, 'sgst': 18.0, 'igst': 0.0}
    assert first['items'][0]['name'] == 'Item X'
    assert first['status_history'][0]['note'] == 'Order placed by vendor'


def place_order(client, make_item, fill_cart, vendor_headers, **body):
    fill_cart([(make_item(quantity=10), 2)])
    response = client.post('/orders', json={'orderType': 'pickup', **body}, headers=vendor_headers)
    assert response.status_code == 201
    return response.get_json()['data']['orders'][0]['id']


def test_order_read_is_limited_to_parties(client, make_item, fill_cart, vendor_headers, supplier_headers):
    order_id = place_order(client, make_item, fill_cart, vendor_headers)

    assert client.get(f'/orders/{order_id}', headers=vendor_headers).status_code == 200
    assert client.get(f'/orders/{order_id}', headers=supplier_headers).status_code == 200
    assert client.get(f'/orders/{order_id}', headers=auth_headers(OTHER_VENDOR_ID, 'vendor')).status_code == 403
    assert client.get(f'/orders/{order_id}', headers=auth_headers(1, 'admin')).status_code == 200
    assert client.get('/orders/9999', headers=vendor_headers).status_code == 404


def test_status_update_errors(client, make_item, fill_cart, vendor_headers, supplier_headers):
    order_id = place_order(client, make_item, fill_cart, vendor_headers)

    response = client.put(f'/orders/{order_id}/status', json={'status': 'confirmed'}, headers=vendor_headers)
    assert response.status_code == 403

    response = client.put(f'/orders/{order_id}/status', json={'status': 'delivered'}, headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'IllegalTransition'

    response = client.put(
        f'/orders/{order_id}/status',
        json={'status': 'confirmed', 'supplierNotes': 'Packing today', 'expectedDate': '2030-01-15T10:00:00Z'},
        headers=supplier_headers,
    )
    assert response.status_code == 200
    order = response.get_json()['data']
    assert order['order_status'] == 'confirmed'
    assert order['supplier_notes'] == 'Packing today'
    assert order['expected_date'] == '2030-01-15T10:00:00'

    response = client.put(f'/orders/{order_id}/status', json={'expectedDate': 'soon'}, headers=supplier_headers)
    assert response.status_code == 400


def test_vendor_cancel_and_retry(client, make_item, fill_cart, vendor_headers):
    order_id = place_order(client, make_item, fill_cart, vendor_headers)

    first = client.put(f'/orders/{order_id}/status', json={'status': 'cancelled'}, headers=vendor_headers)
    retry = client.put(f'/orders/{order_id}/status', json={'status': 'cancelled'}, headers=vendor_headers)

    assert first.status_code == 200
    assert retry.status_code == 400
    assert retry.get_json()['error']['code'] == 'IllegalTransition'
    assert InventoryItem.query.one().quantity_available == 10


def test_listings_are_paginated(client, make_item, fill_cart, vendor_headers, supplier_headers):
    for _ in range(3):
        place_order(client, make_item, fill_cart, vendor_headers)
    client.put('/orders/1/status', json={'status': 'confirmed'}, headers=supplier_headers)

    response = client.get('/orders/vendor/history?page=1&limit=2', headers=vendor_headers)
    assert response.status_code == 200
    data = response.get_json()['data']
    assert len(data['orders']) == 2
    assert 'status_history' not in data['orders'][0]
    assert data['pagination'] == {
        'currentPage': 1, 'totalPages': 2, 'totalOrders': 3, 'hasNextPage': True, 'hasPrevPage': False,
    }

    response = client.get('/orders/supplier/orders?status=placed', headers=supplier_headers)
    data = response.get_json()['data']
    assert data['pagination']['totalOrders'] == 2
    assert data['statusCounts'] == {'placed': 2, 'confirmed': 1}

    assert client.get('/orders/supplier/orders?status=bogus', headers=supplier_headers).status_code == 400
    assert client.get('/orders/vendor/history?page=0', headers=vendor_headers).status_code == 400


def test_delivery_flow_through_api(client, make_item, fill_cart, vendor_headers, supplier_headers,
                                   partner_headers, delivery_address, pickup_address):
    order_id = place_order(
        client, make_item, fill_cart, vendor_headers, orderType='delivery', deliveryAddress=delivery_address,
    )

    response = client.post('/deliveries', json={
        'orderId': order_id, 'deliveryPartnerId': PARTNER_ID, 'pickupAddress': pickup_address,
    }, headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'OrderNotReady'

    for status in ('confirmed', 'processing', 'ready'):
        assert client.put(f'/orders/{order_id}/status', json={'status': status},
                          headers=supplier_headers).status_code == 200

    response = client.post('/deliveries', json={
        'orderId': order_id, 'deliveryPartnerId': PARTNER_ID, 'pickupAddress': pickup_address,
        'deliveryInstructions': 'Ring twice', 'deliveryFee': 40,
    }, headers=supplier_headers)
    assert response.status_code == 201
    delivery_id = response.get_json()['data']['id']

    response = client.post('/deliveries', json={
        'orderId': order_id, 'deliveryPartnerId': PARTNER_ID, 'pickupAddress': pickup_address,
    }, headers=supplier_headers)
    assert response.get_json()['error']['code'] == 'OrderAlreadyAssigned'

    for status, order_status in (('partner_confirmed', 'ready'), ('picked_up', 'picked_up'),
                                 ('on_the_way', 'on_delivery')):
        response = client.put(f'/deliveries/{delivery_id}/status', json={
            'status': status, 'location': {'latitude': 18.5, 'longitude': 73.8},
        }, headers=partner_headers)
        assert response.status_code == 200
        assert response.get_json()['data']['orderStatus'] == order_status

    tracking = client.get(f'/deliveries/track/{order_id}')
    assert tracking.status_code == 200
    view = tracking.get_json()['data']
    assert view['status'] == 'on_the_way'
    assert view['deliveryInstructions'] == 'Ring twice'
    assert 'timeline' not in view

    details = client.get(f'/deliveries/{delivery_id}', headers=vendor_headers)
    assert len(details.get_json()['data']['timeline']) == 4
    assert client.get(f'/deliveries/{delivery_id}', headers=auth_headers(OTHER_VENDOR_ID, 'vendor')).status_code == 403

    listing = client.get('/deliveries/partner?status=on_the_way', headers=partner_headers)
    assert listing.get_json()['count'] == 1

    response = client.put(f'/deliveries/{delivery_id}/status', json={'status': 'delivered'}, headers=partner_headers)
    assert response.get_json()['data']['orderStatus'] == 'delivered'

    response = client.post(f'/orders/{order_id}/confirm-payment', json={}, headers=supplier_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['payment_status'] == 'paid'

    response = client.post(f'/orders/{order_id}/confirm-payment', json={}, headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'PaymentAlreadyConfirmed'


def test_confirm_payment_before_delivery(client, make_item, fill_cart, vendor_headers, supplier_headers):
    order_id = place_order(client, make_item, fill_cart, vendor_headers)
    response = client.post(f'/orders/{order_id}/confirm-payment', json={}, headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'OrderNotDelivered'


def test_restock_and_movements(client, make_item, supplier_headers):
    item = make_item(quantity=0)

    response = client.post(f'/inventory/{item.id}/restock', json={'quantity': 12}, headers=supplier_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['item']['quantity_available'] == 12
    assert response.get_json()['data']['item']['out_of_stock'] is False

    other = auth_headers(OTHER_SUPPLIER_ID, 'supplier')
    assert client.post(f'/inventory/{item.id}/restock', json={'quantity': 1}, headers=other).status_code == 403
    assert client.post(f'/inventory/{item.id}/restock', json={}, headers=supplier_headers).status_code == 400

    response = client.get(f'/inventory/{item.id}/movements', headers=supplier_headers)
    movements = response.get_json()['data']
    assert [m['movement_type'] for m in movements] == ['Restock']
    assert client.get(f'/inventory/{item.id}/movements', headers=other).status_code == 403


def test_unknown_route_uses_json_errors(client):
    response = client.get('/nope')
    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'NotFound'


def test_each_request_is_authenticated_from_its_own_headers(client, vendor_headers, supplier_headers):
    assert client.get('/orders/vendor/history', headers=vendor_headers).status_code == 200
    assert client.get('/orders/vendor/history', headers=supplier_headers).status_code == 403
    assert client.get('/orders/vendor/history').status_code == 401
    assert client.get('/orders/supplier/orders', headers=supplier_headers).status_code == 200


def test_non_text_vendor_notes_return_validation_error(client, make_item, fill_cart, vendor_headers):
    item = make_item(quantity=5)
    fill_cart([(item, 2)])

    response = client.post('/orders', json={'orderType': 'pickup', 'vendorNotes': ['a']}, headers=vendor_headers)

    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'ValidationError'
    assert Order.query.count() == 0
    assert InventoryItem.query.one().quantity_available == 5


def test_non_text_status_note_returns_validation_error(client, make_item, fill_cart, vendor_headers,
                                                       supplier_headers):
    order_id = place_order(client, make_item, fill_cart, vendor_headers)
    response = client.put(f'/orders/{order_id}/status', json={'status': 'confirmed', 'supplierNotes': {'a': 1}},
                          headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'ValidationError'


def test_truncated_json_body_is_rejected(client, make_item, fill_cart, vendor_headers):
    fill_cart([(make_item(quantity=5), 1)])

    response = client.post('/orders', data='{"orderType": "delivery", ', content_type='application/json',
                           headers=vendor_headers)

    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['code'] == 'ValidationError'
    assert error['message'] == 'Request body must be valid JSON'
    assert Order.query.count() == 0
    assert InventoryItem.query.one().quantity_available == 5


def test_json_array_body_is_rejected(client, vendor_headers):
    response = client.post('/orders', json=['pickup'], headers=vendor_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['message'] == 'Request body must be a JSON object'


def test_absent_body_checks_out_with_defaults(client, make_item, fill_cart, vendor_headers):
    fill_cart([(make_item(quantity=5), 1)])
    response = client.post('/orders', headers=vendor_headers)
    assert response.status_code == 201
    order = response.get_json()['data']['orders'][0]
    assert order['order_type'] == 'pickup'
    assert order['payment_status'] == 'cash_on_delivery'


@pytest.mark.parametrize('value, expected', [(7, 7), (7.0, 7), ('7', 7)])
def test_required_int_accepts_whole_numbers(value, expected):
    assert required_int({'orderId': value}, 'orderId') == expected


@pytest.mark.parametrize('value', [1.7, '1.7', True, 'one', [1]])
def test_required_int_rejects_other_values(value):
    with pytest.raises(ValidationError):
        required_int({'orderId': value}, 'orderId')


def test_fractional_order_id_is_rejected(client, supplier_headers, pickup_address):
    response = client.post('/deliveries', json={
        'orderId': 1.7, 'deliveryPartnerId': PARTNER_ID, 'pickupAddress': pickup_address,
    }, headers=supplier_headers)
    assert response.status_code == 400
    assert response.get_json()['error']['details'] == {'orderId': 1.7}
