"""Decoding of JSON payloads carried in command ``Text`` fields."""

import json

from protean.exceptions import ValidationError


def decode_json_field(field_name, value, expected_type):
    """Return ``value`` decoded from JSON text, checked to be an ``expected_type``.

    Already-decoded values are only type checked.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError({field_name: [f"{field_name} is not valid JSON"]}) from None

    if not isinstance(value, expected_type):
        raise ValidationError({field_name: [f"{field_name} must be a JSON {expected_type.__name__}"]})
    return value
