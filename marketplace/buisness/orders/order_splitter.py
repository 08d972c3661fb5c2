from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.buisness.carts.cart_store import CartLineSnapshot, CartStore
from marketplace.buisness.inventory.catalog_gateway import CatalogGateway, ItemSnapshot
from marketplace.buisness.inventory.reservation_service import InventoryReservationService
from marketplace.buisness.orders.pricing import TaxPolicy, to_money
from marketplace.buisness.shared.field_validation import optional_text
from marketplace.data.orders.order import Order, OrderLine
from marketplace.data.orders.order_status_history import OrderStatusHistory
from marketplace.data.orders.statuses import OrderStatus, OrderType, PaymentMethod
from marketplace.errors import EmptyCart, MarketplaceError, ValidationError
from marketplace.logger import get_logger

logger = get_logger("marketplace.buisness.orders.splitter")

REQUIRED_ADDRESS_FIELDS = ('addressLine1', 'city', 'state', 'pincode')


@dataclass
class SupplierGroup:
    supplier_id: int
    lines: list[tuple[ItemSnapshot, int]] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((item.price * quantity for item, quantity in self.lines), Decimal('0')))


@dataclass(frozen=True)
class CheckoutResult:
    checkout_reference: str
    orders: list[Order]
    total_value: Decimal


class OrderSplitter:
    """
    Converts a vendor's cart into one order per supplier.

    Checkout is a single unit of work: every reservation, every order row and
    the cart clear are committed together, or the transaction is rolled back
    and the error is re-raised. A failed checkout leaves stock, orders and
    cart exactly as they were.
    """

    def __init__(
        self,
        reservations: InventoryReservationService | None = None,
        cart_store: CartStore | None = None,
        catalog: CatalogGateway | None = None,
        tax_policy: TaxPolicy | None = None,
    ):
        self.reservations = reservations or InventoryReservationService()
        self.cart_store = cart_store or CartStore()
        self.catalog = catalog or CatalogGateway()
        self.tax_policy = tax_policy

    @staticmethod
    def _generate_checkout_reference() -> str:
        return f"CHK-{date.today().isoformat()}-{uuid4().hex[:8].upper()}"

    @staticmethod
    def _parse_order_type(order_type) -> OrderType:
        try:
            return OrderType(order_type or OrderType.PICKUP.value)
        except ValueError:
            raise ValidationError(
                f"orderType must be one of: {', '.join(t.value for t in OrderType)}",
                details={'orderType': order_type},
            )

    @staticmethod
    def _parse_payment_method(payment_method) -> PaymentMethod:
        try:
            return PaymentMethod(payment_method or PaymentMethod.CASH_ON_DELIVERY.value)
        except ValueError:
            raise ValidationError(
                f"paymentMethod must be one of: {', '.join(m.value for m in PaymentMethod)}",
                details={'paymentMethod': payment_method},
            )

    @staticmethod
    def _validate_delivery_address(order_type: OrderType, delivery_address) -> dict | None:
        if order_type is not OrderType.DELIVERY:
            return None
        if not isinstance(delivery_address, dict) or not delivery_address:
            raise ValidationError("deliveryAddress is required for delivery orders")
        missing = [key for key in REQUIRED_ADDRESS_FIELDS if not delivery_address.get(key)]
        if missing:
            raise ValidationError(
                f"deliveryAddress is missing: {', '.join(missing)}",
                details={'missing': missing},
            )
        return dict(delivery_address)

    def group_by_supplier(self, cart_lines: list[CartLineSnapshot]) -> list[SupplierGroup]:
        """Resolve cart lines to current catalog snapshots and group them by supplier."""
        snapshots = self.catalog.get_snapshots([line.inventory_item_id for line in cart_lines])
        groups: dict[int, SupplierGroup] = {}
        for line in cart_lines:
            item = snapshots[line.inventory_item_id]
            group = groups.setdefault(item.supplier_id, SupplierGroup(item.supplier_id))
            group.lines.append((item, line.quantity))
        return list(groups.values())

    def checkout(
        self,
        *,
        vendor_id: int,
        order_type=None,
        delivery_address=None,
        payment_method=None,
        vendor_notes: str | None = None,
    ) -> CheckoutResult:
        """
        Place one order per supplier from the vendor's cart.

        Raises:
            ValidationError: bad orderType / paymentMethod / deliveryAddress / vendorNotes
            EmptyCart: nothing to check out
            NotFound: a cart line points at an unknown item
            InsufficientStock: any line cannot be reserved (nothing is kept)
        """
        order_type = self._parse_order_type(order_type)
        payment = self._parse_payment_method(payment_method)
        address = self._validate_delivery_address(order_type, delivery_address)
        vendor_notes = optional_text(vendor_notes, 'vendorNotes')

        cart_lines = self.cart_store.get_lines(vendor_id)
        if not cart_lines:
            raise EmptyCart()

        tax_policy = self.tax_policy or TaxPolicy.from_config()
        reference = self._generate_checkout_reference()

        try:
            groups = self.group_by_supplier(cart_lines)

            reserved = 0
            for group in groups:
                for item, quantity in group.lines:
                    self.reservations.reserve(
                        item.id, quantity,
                        actor_id=vendor_id,
                        reference_type='checkout',
                        notes=reference,
                    )
                    reserved += 1

            orders = [
                self._build_order(
                    group,
                    vendor_id=vendor_id,
                    reference=reference,
                    order_type=order_type,
                    address=address,
                    payment=payment,
                    vendor_notes=vendor_notes,
                    tax_policy=tax_policy,
                )
                for group in groups
            ]
            db.session.add_all(orders)
            self.cart_store.clear(vendor_id)
            db.session.commit()
        except MarketplaceError as e:
            db.session.rollback()
            logger.warning(f"Checkout {reference} for vendor {vendor_id} rolled back: {e.message}")
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Checkout {reference} for vendor {vendor_id} failed; all reservations rolled back")
            raise

        total_value = to_money(sum((order.total_amount for order in orders), Decimal('0')))
        logger.info(
            f"Checkout {reference}: vendor {vendor_id} placed {len(orders)} order(s) "
            f"({reserved} line reservation(s)), total {total_value}"
        )
        return CheckoutResult(checkout_reference=reference, orders=orders, total_value=total_value)

    def _build_order(
        self,
        group: SupplierGroup,
        *,
        vendor_id: int,
        reference: str,
        order_type: OrderType,
        address: dict | None,
        payment: PaymentMethod,
        vendor_notes: str | None,
        tax_policy: TaxPolicy,
    ) -> Order:
        subtotal = group.subtotal
        tax = tax_policy.apply(subtotal)

        order = Order(
            vendor_id=vendor_id,
            supplier_id=group.supplier_id,
            checkout_reference=reference,
            order_type=order_type.value,
            delivery_address=address,
            vendor_notes=vendor_notes,
            subtotal=subtotal,
            cgst=tax.cgst,
            sgst=tax.sgst,
            igst=tax.igst,
            total_amount=subtotal + tax.total,
            order_status=OrderStatus.PLACED.value,
            payment_method=payment.value,
            payment_status=payment.initial_payment_status.value,
            created_by_id=vendor_id,
            updated_by_id=vendor_id,
        )
        for position, (item, quantity) in enumerate(group.lines):
            order.lines.append(OrderLine(
                position=position,
                inventory_item_id=item.id,
                name=item.name,
                quantity=quantity,
                unit_price=to_money(item.price),
                line_total=to_money(item.price * quantity),
            ))
        order.status_history.append(OrderStatusHistory(
            status=OrderStatus.PLACED.value,
            updated_by_id=vendor_id,
            note='Order placed by vendor',
        ))
        return order
