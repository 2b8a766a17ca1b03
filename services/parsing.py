"""
Parsing Service

Functions for turning user and database values into Decimals. Quantities
and prices arrive as floats, ints, strings in dot notation ("1.5"), strings
in Brazilian notation ("1.234,56") or fractions ("1 1/2", "½").
"""

import re
from decimal import Decimal, InvalidOperation

# Unicode fraction characters mapping
UNICODE_FRACTIONS = {
    '\u00bd': '1/2',  # ½
    '\u2153': '1/3',  # ⅓
    '\u2154': '2/3',  # ⅔
    '\u00bc': '1/4',  # ¼
    '\u00be': '3/4',  # ¾
    '\u215b': '1/8',  # ⅛
}


def to_decimal(value):
    """
    Convert a number to Decimal without binary float drift.

    Floats go through ``str()`` so 0.1 becomes Decimal('0.1') rather than
    its full binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError('Booleans are not quantities')
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f'Not a number: {value!r}') from None
    raise TypeError(f'Cannot convert {type(value).__name__} to Decimal')


def normalize_number_text(text):
    """Convert '1.234,56' / '1,5' to '1234.56' / '1.5'. Dot notation passes through."""
    text = text.strip().replace('R$', '').replace(' ', '')
    if ',' in text:
        if '.' in text and text.rfind('.') < text.rfind(','):
            text = text.replace('.', '')
        text = text.replace(',', '.')
    return text


def _parse_fraction_str(s):
    """Parse '1/2' or '1 1/2' into a Decimal, or None."""
    for char, frac in UNICODE_FRACTIONS.items():
        if char in s:
            s = re.sub(r'(\d)\s*' + re.escape(char), r'\1 ' + frac, s)
            s = s.replace(char, frac)
    s = s.strip()

    mixed_match = re.match(r'^(\d+)\s+(\d+)\s*/\s*(\d+)$', s)
    if mixed_match:
        whole, num, denom = (Decimal(g) for g in mixed_match.groups())
        if denom == 0:
            return None
        return whole + num / denom

    frac_match = re.match(r'^(\d+)\s*/\s*(\d+)$', s)
    if frac_match:
        num, denom = (Decimal(g) for g in frac_match.groups())
        if denom == 0:
            return None
        return num / denom

    return None


def parse_decimal(value, default=None, min_val=None, max_val=None):
    """
    Parse a user-supplied number into a finite Decimal.

    Returns ``default`` when the value is empty or unparseable, or when it
    falls outside [min_val, max_val].
    """
    if value is None or value == '':
        return default

    if isinstance(value, str):
        result = _parse_fraction_str(value)
        if result is None:
            try:
                result = to_decimal(normalize_number_text(value))
            except ValueError:
                return default
    else:
        try:
            result = to_decimal(value)
        except (TypeError, ValueError):
            return default

    if not result.is_finite():
        return default
    if min_val is not None and result < min_val:
        return default
    if max_val is not None and result > max_val:
        return default
    return result


def safe_int(value, default=None, min_val=None, max_val=None):
    """Parse an integer value; out-of-range or invalid input returns ``default``."""
    if isinstance(value, bool):
        return default
    try:
        if isinstance(value, float) and not value.is_integer():
            return default
        result = int(value)
    except (ValueError, TypeError):
        return default
    if min_val is not None and result < min_val:
        return default
    if max_val is not None and result > max_val:
        return default
    return result
