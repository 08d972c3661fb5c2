"""
Test the logging sanitizer utility.
Verifies credentials and contact details are redacted from logged payloads.
"""

from marketplace.utils.logging_sanitizer import (
    SENSITIVE_FIELDS,
    is_sensitive,
    sanitize_exception_message,
    sanitize_payload,
)


def test_sanitize_checkout_payload():
    payload = {
        'orderType': 'delivery',
        'paymentMethod': 'credit',
        'deliveryAddress': {
            'addressLine1': '12 Market Road',
            'city': 'Pune',
            'contactPerson': 'R. Patil',
            'contactPhone': '9820000000',
        },
    }
    result = sanitize_payload(payload)
    assert result['orderType'] == 'delivery'
    assert result['deliveryAddress']['city'] == 'Pune'
    assert result['deliveryAddress']['contactPhone'] == '[REDACTED]'
    # The caller's payload is not modified
    assert payload['deliveryAddress']['contactPhone'] == '9820000000'


def test_key_matching_folds_case_and_separators():
    for key in ('contactPhone', 'contact_phone', 'CONTACT-PHONE', 'Password', 'api_key', 'authToken'):
        assert is_sensitive(key), key
    for key in ('city', 'pincode', 'status', 'quantity'):
        assert not is_sensitive(key), key


def test_lists_are_walked():
    result = sanitize_payload({'contacts': [{'phone': '1'}, {'name': 'x'}], 'tags': ['a', 'b']})
    assert result == {'contacts': [{'phone': '[REDACTED]'}, {'name': 'x'}], 'tags': ['a', 'b']}


def test_custom_redaction_text():
    assert sanitize_payload({'otp': '1234'}, redact_text='***') == {'otp': '***'}


def test_non_dict_values_pass_through():
    assert sanitize_payload('plain') == 'plain'
    assert sanitize_payload(None) is None


def test_sanitize_exception_message():
    assert sanitize_exception_message(ValueError('quantity must be positive')) == 'quantity must be positive'
    message = sanitize_exception_message(RuntimeError('bad api_key supplied'))
    assert message == 'RuntimeError: [Message contains sensitive data]'


def test_sensitive_fields_are_normalized():
    for field in SENSITIVE_FIELDS:
        assert field == field.lower()
        assert '_' not in field and '-' not in field
