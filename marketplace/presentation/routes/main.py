from flask import Blueprint, jsonify
from sqlalchemy import text

from marketplace import db
from marketplace.logger import get_logger

logger = get_logger("marketplace.routes.main")

bp = Blueprint('main', __name__)


@bp.get('/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
        database = 'ok'
    except Exception as e:
        db.session.rollback()
        logger.error(f"Health check database query failed: {e}")
        database = 'unavailable'
    status = 200 if database == 'ok' else 503
    return jsonify({'status': 'ok' if status == 200 else 'degraded', 'database': database}), status
