#!/usr/bin/env python3
"""
Run script for the wholesale marketplace API
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before the config module reads them
load_dotenv()

from marketplace import create_app
from marketplace.build import build_database
from marketplace.logger import get_logger

logger = get_logger("marketplace.run")


def parse_arguments():
    """Parse command line arguments for the build step"""
    parser = argparse.ArgumentParser(description='Wholesale Marketplace API')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables (and demo data with --seed), then exit')
    parser.add_argument('--seed', action='store_true',
                        help='Load demo catalog items and vendor carts from marketplace/debug/data/catalog.json')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    app = create_app()

    logger.debug("Starting Wholesale Marketplace API...")
    with app.app_context():
        summary = build_database(enable_debug_data=args.seed)
    if summary:
        logger.info(f"Demo data: {summary}")

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
