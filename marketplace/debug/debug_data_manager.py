#!/usr/bin/env python3
"""
Debug Data Manager
Loads demo suppliers' catalog items and vendor carts

Handles:
- Loading the demo data JSON file
- Skipping insertion when the items are already present
- Filling carts through CartStore so the data matches real checkouts
- Fail-fast error handling
"""

from decimal import Decimal
from pathlib import Path
import json

from marketplace import db
from marketplace.buisness.carts.cart_store import CartStore
from marketplace.data.catalog.inventory_item import InventoryItem
from marketplace.logger import get_logger

logger = get_logger("marketplace.debug_data_manager")

DATA_FILE = Path(__file__).parent / 'data' / 'catalog.json'


def insert_debug_data(enabled=True, data_file=DATA_FILE):
    """
    Insert demo catalog items and carts.

    Args:
        enabled (bool): Whether to insert demo data (default: True)
        data_file (Path): JSON file to load

    Returns:
        dict: Summary of inserted data

    Raises:
        Exception: If insertion fails (fail-fast, nothing is committed)
    """
    if not enabled:
        logger.info("Debug data insertion is disabled")
        return {}

    debug_data = _load_debug_data_file(data_file)
    if not debug_data:
        logger.info(f"No debug data file found at {data_file}, skipping")
        return {'status': 'skipped', 'reason': 'file_not_found'}

    if _check_debug_data_present(debug_data):
        logger.info("Debug data already present, skipping")
        return {'status': 'skipped', 'reason': 'data_present'}

    try:
        items_by_key = _insert_items(debug_data.get('items', []))
        cart_lines = _insert_carts(debug_data.get('carts', []), items_by_key)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to insert debug data: {e}")
        raise

    logger.info(f"Inserted {len(items_by_key)} demo items and {cart_lines} cart line(s)")
    return {'status': 'inserted', 'items': len(items_by_key), 'cart_lines': cart_lines}


def _load_debug_data_file(data_file):
    data_file = Path(data_file)
    if not data_file.exists():
        return None
    with open(data_file, 'r') as f:
        return json.load(f)


def _check_debug_data_present(debug_data):
    items = debug_data.get('items', [])
    if not items:
        return True
    first = items[0]
    return InventoryItem.query.filter_by(
        supplier_id=first['supplier_id'],
        name=first['name'],
    ).first() is not None


def _insert_items(items):
    """Insert catalog items; returns {key: InventoryItem}"""
    inserted = {}
    for entry in items:
        quantity = int(entry.get('quantity_available', 0))
        item = InventoryItem(
            supplier_id=entry['supplier_id'],
            name=entry['name'],
            description=entry.get('description'),
            category=entry.get('category'),
            price=Decimal(str(entry['price'])),
            quantity_available=quantity,
            out_of_stock=quantity == 0,
            created_by_id=entry['supplier_id'],
            updated_by_id=entry['supplier_id'],
        )
        db.session.add(item)
        inserted[entry.get('key', entry['name'])] = item
    db.session.flush()
    return inserted


def _insert_carts(carts, items_by_key):
    store = CartStore()
    count = 0
    for cart in carts:
        for line in cart.get('lines', []):
            item = items_by_key.get(line['item'])
            if item is None:
                raise KeyError(f"Demo cart references unknown item key {line['item']!r}")
            store.set_line(cart['vendor_id'], item.id, int(line['quantity']))
            count += 1
    return count
