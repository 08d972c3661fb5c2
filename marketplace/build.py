#!/usr/bin/env python3
"""
Build orchestrator for the marketplace database
Creates tables and optionally loads demo data
"""

from marketplace import db
from marketplace.logger import get_logger

logger = get_logger("marketplace.build")


def build_database(enable_debug_data=False):
    """
    Create all tables, then insert demo data if requested.

    Must be called inside an application context.

    Args:
        enable_debug_data (bool): Load marketplace/debug/data/catalog.json

    Returns:
        dict: Summary of inserted demo data (empty when disabled)
    """
    logger.info("Creating database tables...")
    db.create_all()
    logger.info("Database tables ready")

    if not enable_debug_data:
        return {}

    from marketplace.debug.debug_data_manager import insert_debug_data
    return insert_debug_data(enabled=True)
