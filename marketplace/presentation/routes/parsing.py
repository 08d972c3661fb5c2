"""Request parsing helpers shared by the JSON blueprints."""

from datetime import datetime, timezone

from flask import request

from marketplace.errors import ValidationError
from marketplace.logger import get_logger
from marketplace.utils.logging_sanitizer import sanitize_payload

logger = get_logger("marketplace.routes")


def json_body() -> dict:
    """Return the request's JSON object, logging a redacted copy. An empty body reads as ``{}``."""
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    logger.debug(f"{request.method} {request.path} payload: {sanitize_payload(data)}")
    return data


def parse_iso_datetime(value, field: str):
    if value in (None, ''):
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date", details={field: value})
    if parsed.tzinfo is not None:
        # Stored as naive UTC
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def positive_int_arg(name: str):
    raw = request.args.get(name)
    if raw in (None, ''):
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", details={name: raw})
    if value < 1:
        raise ValidationError(f"{name} must be a positive integer", details={name: raw})
    return value


def required_int(data: dict, field: str) -> int:
    """Whole-number field; numeric strings are accepted, fractions are not."""
    value = data.get(field)
    if value is None:
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", details={field: value})
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be a whole number", details={field: value})
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", details={field: value})
