"""
Input Validation

Small checks shared by the recipe and draft services. Each returns the
cleaned value or raises ValidationError with a caller-fixable message.
"""

from constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

from .errors import ValidationError
from .parsing import safe_int


def require_text(value, field_name, max_length=None):
    """Trimmed non-blank string, at most max_length characters."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be {max_length} characters or less")
    return value


def optional_text(value, field_name, max_length=None):
    """Trimmed string or None for blanks."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    value = value.strip()
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be {max_length} characters or less")
    return value


def optional_positive_int(value, field_name):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive number")
    if number < 1:
        raise ValidationError(f"{field_name} must be a positive number")
    return number


def require_list(value, field_name):
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    return list(value)


def page_bounds(limit, offset, default_limit=DEFAULT_PAGE_LIMIT):
    """Clamp limit to [1, MAX_PAGE_LIMIT] and offset to >= 0."""
    limit = safe_int(limit, default_limit, min_val=1, max_val=MAX_PAGE_LIMIT)
    offset = safe_int(offset, 0, min_val=0)
    return limit, offset
