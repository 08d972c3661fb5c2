from marketplace.errors import ValidationError


def optional_text(value, field: str) -> str | None:
    """Free-text fields are either absent or a string."""
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f"{field} must be a string", details={field: value})
