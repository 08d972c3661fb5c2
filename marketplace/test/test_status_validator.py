from marketplace.buisness.shared.status_validator import StatusValidator
from marketplace.data.deliveries.delivery import DeliveryStatus
from marketplace.data.orders.statuses import OrderStatus


def test_enum_members_and_strings_are_interchangeable():
    assert StatusValidator.can_transition(StatusValidator.ORDER, OrderStatus.PLACED, OrderStatus.CONFIRMED)
    assert StatusValidator.can_transition(StatusValidator.ORDER, 'placed', 'confirmed')
    assert StatusValidator.can_transition(StatusValidator.ORDER, OrderStatus.READY, 'delivered')


def test_cancel_is_not_in_the_order_table():
    for status in OrderStatus:
        assert OrderStatus.CANCELLED.value not in StatusValidator.next_states(StatusValidator.ORDER, status)


def test_terminal_order_states_have_no_moves():
    for status in ('delivered', 'cancelled', 'rejected'):
        assert StatusValidator.is_order_terminal(status)
        assert StatusValidator.next_states(StatusValidator.ORDER, status) == frozenset()
        assert not StatusValidator.can_cancel(status)


def test_mirrored_order_states_can_only_be_cancelled():
    for status in (OrderStatus.PICKED_UP, OrderStatus.ON_DELIVERY):
        assert StatusValidator.next_states(StatusValidator.ORDER, status) == frozenset()
        assert StatusValidator.can_cancel(status)


def test_delivery_table():
    assert StatusValidator.next_states(StatusValidator.DELIVERY, DeliveryStatus.ASSIGNED) == {
        'partner_confirmed', 'failed', 'cancelled',
    }
    assert StatusValidator.next_states(StatusValidator.DELIVERY, 'on_the_way') == {'delivered', 'failed'}
    for status in ('delivered', 'failed', 'cancelled'):
        assert StatusValidator.is_delivery_terminal(status)
        assert StatusValidator.next_states(StatusValidator.DELIVERY, status) == frozenset()
