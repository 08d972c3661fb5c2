"""
Order Query Service
Read-side queries over orders for the vendor and supplier listings.

Handles:
- Role-scoped, paginated order listings with an optional status filter
- Status-count breakdown for the supplier dashboard
- Party checks for single-order reads
"""

from typing import Any, Dict, Optional

from flask import current_app
from flask_sqlalchemy.pagination import Pagination
from sqlalchemy import func

from marketplace import db
from marketplace.data.orders.order import Order
from marketplace.data.orders.statuses import OrderStatus
from marketplace.errors import Forbidden, NotFound, ValidationError


class OrderQueryService:
    """
    Service for order presentation data.

    Provides methods for:
    - Vendor order history
    - Supplier incoming orders with status counts
    - Single-order reads restricted to the order's parties
    """

    @staticmethod
    def page_params(page: Optional[int], limit: Optional[int]) -> tuple:
        """
        Normalize page/limit query arguments.

        Args:
            page: 1-based page number, None for the first page
            limit: Page size, None for the configured default

        Returns:
            Tuple of (page, per_page)
        """
        default_size = current_app.config.get('ORDERS_PAGE_SIZE', 10)
        max_size = current_app.config.get('ORDERS_MAX_PAGE_SIZE', 100)
        page = page or 1
        per_page = limit or default_size
        if page < 1 or per_page < 1:
            raise ValidationError("page and limit must be positive integers")
        return page, min(per_page, max_size)

    @staticmethod
    def _filtered(query, status: Optional[str]):
        if status and status != 'all':
            if OrderStatus.parse(status) is None:
                raise ValidationError(
                    f"Invalid status filter: {status}",
                    details={'status': status},
                )
            query = query.filter(Order.order_status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc())

    @staticmethod
    def vendor_history(vendor_id: int, page: Optional[int] = None, limit: Optional[int] = None,
                       status: Optional[str] = None) -> Pagination:
        page, per_page = OrderQueryService.page_params(page, limit)
        query = OrderQueryService._filtered(Order.query.filter_by(vendor_id=vendor_id), status)
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def supplier_orders(supplier_id: int, page: Optional[int] = None, limit: Optional[int] = None,
                        status: Optional[str] = None) -> Pagination:
        page, per_page = OrderQueryService.page_params(page, limit)
        query = OrderQueryService._filtered(Order.query.filter_by(supplier_id=supplier_id), status)
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def status_counts(supplier_id: int) -> Dict[str, int]:
        """
        Count a supplier's orders per status.

        Returns:
            Dictionary of status -> count, containing only statuses in use
        """
        rows = (
            db.session.query(Order.order_status, func.count(Order.id))
            .filter(Order.supplier_id == supplier_id)
            .group_by(Order.order_status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def pagination_meta(pagination: Pagination) -> Dict[str, Any]:
        return {
            'currentPage': pagination.page,
            'totalPages': pagination.pages,
            'totalOrders': pagination.total,
            'hasNextPage': pagination.has_next,
            'hasPrevPage': pagination.has_prev,
        }

    @staticmethod
    def get_order_for(order_id: int, principal) -> Order:
        """
        Get an order the principal is a party to.

        Raises:
            NotFound: unknown order
            Forbidden: principal is neither the vendor nor the supplier (admins may read any order)
        """
        order = db.session.get(Order, order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        if not (principal.is_admin or order.is_party(principal.id)):
            raise Forbidden("Access denied to this order")
        return order
