"""
Parsing Service

Functions for coercing loosely typed input (form values, AI parse output)
into the shapes the catalog stores. Quantities stay strings so fractions
like "1/2" survive untouched.
"""

import re
from constants import UNIT_MAPPINGS, UNICODE_FRACTIONS


def safe_int(value, default=None, min_val=None, max_val=None):
    """Safely parse an integer value with optional bounds."""
    try:
        result = int(value) if value not in (None, '') else default
        if result is None:
            return None
        if min_val is not None:
            result = max(min_val, result)
        if max_val is not None:
            result = min(max_val, result)
        return result
    except (ValueError, TypeError):
        return default


def clean_text(value):
    """Strip a string; blank and None both become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_fractions(text):
    """Replace Unicode fraction characters with ASCII fractions ('1½' -> '1 1/2')."""
    # First, normalize all whitespace (including non-breaking spaces) to regular spaces
    text = re.sub(r'[\s  -​]+', ' ', text)

    for char, fraction in UNICODE_FRACTIONS.items():
        if char in text:
            # Mixed fraction like "1½" becomes "1 1/2"
            text = re.sub(r'(\d)\s*' + re.escape(char), r'\1 ' + fraction, text)
            text = text.replace(char, fraction)
    return text


def split_ingredient_line(text):
    """
    Split a free-text ingredient line like '2 1/2 cups flour'.

    Returns:
        (quantity, unit, name) where quantity and unit are strings or None
    """
    text = normalize_fractions((text or '').strip())
    if not text:
        return None, None, None

    # Mixed fractions first, then simple fractions, then numbers and ranges
    qty_pattern = r'^(\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?(?:\s*-\s*\d+(?:\.\d+)?)?)\s*'
    quantity = None
    qty_match = re.match(qty_pattern, text)
    if qty_match:
        quantity = re.sub(r'\s*/\s*', '/', qty_match.group(1).strip())
        text = text[qty_match.end():].strip()

    unit = None
    words = text.split()
    if words and len(words) > 1:
        first_word = words[0].lower().rstrip('.')
        if first_word in UNIT_MAPPINGS:
            unit = UNIT_MAPPINGS[first_word]
            text = ' '.join(words[1:])

    name = text.strip()
    return quantity, unit, name or None
