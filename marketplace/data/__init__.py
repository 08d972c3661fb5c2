"""
Data layer: Flask-SQLAlchemy models only (CRUD, no workflows).

- core/        audit base shared by every table
- catalog/     inventory items and their stock movement audit log
- carts/       vendor carts
- orders/      supplier-scoped orders, frozen lines, status history
- deliveries/  deliveries and their timelines
"""
