"""
Logging Sanitizer Utility

Redacts credentials and personal contact details from request payloads before
they are written to the logs. Keys are matched case-insensitively and with
camelCase/snake_case folded together, so "contactPhone" and "contact_phone"
are treated alike.
"""

from typing import Any


# Normalized keys (lower case, no underscores or dashes) that are never logged
SENSITIVE_FIELDS = {
    'password',
    'secret',
    'token',
    'apikey',
    'authtoken',
    'accesstoken',
    'refreshtoken',
    'sessionid',
    'phone',
    'contactphone',
    'otp',
    'signature',
    'gstnumber',
    'creditcard',
    'cvv',
}


def _normalize(key: str) -> str:
    return str(key).lower().replace('_', '').replace('-', '')


def is_sensitive(key: str) -> bool:
    return _normalize(key) in SENSITIVE_FIELDS


def sanitize_payload(data: Any, redact_text: str = '[REDACTED]') -> Any:
    """
    Sanitize a JSON-like payload by replacing sensitive values with redaction text.

    Dictionaries are walked recursively, including dictionaries inside lists.

    Example:
        >>> sanitize_payload({'deliveryAddress': {'city': 'Pune', 'contactPhone': '98200'}})
        {'deliveryAddress': {'city': 'Pune', 'contactPhone': '[REDACTED]'}}
    """
    if isinstance(data, dict):
        return {
            key: redact_text if is_sensitive(key) else sanitize_payload(value, redact_text)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [sanitize_payload(value, redact_text) for value in data]
    return data


def sanitize_exception_message(exception: Exception) -> str:
    """
    Return an exception message that is safe to log.

    Messages mentioning a sensitive field name are replaced wholesale.
    """
    message = str(exception)
    folded = _normalize(message)
    if any(field in folded for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"
    return message
