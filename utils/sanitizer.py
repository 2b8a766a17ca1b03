"""
Input Sanitization Module

Cleans free-text fields (names, descriptions, notes) before they are stored.

Values are stored as typed and returned as JSON, so nothing is HTML-escaped
here; escaping is the job of whatever renders them.
"""

import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')
# Same as above but keeps tabs and newlines for multi-line fields
_TEXT_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
_HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text by removing control characters.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Sanitized string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    # Remove control characters and null bytes, keeping line breaks
    text = _TEXT_CONTROL_CHARS.sub('', text)

    # Strip leading/trailing whitespace
    text = text.strip()

    # Truncate if too long
    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_name(name, max_length=100):
    """
    Sanitize a product, recipe, category or supplier name.

    Returns an empty string when nothing usable is left, so callers can
    report the field as required.
    """
    if not name:
        return ''

    if not isinstance(name, str):
        name = str(name)

    # Remove control characters and null bytes
    name = _CONTROL_CHARS.sub(' ', name)

    # Collapse multiple spaces
    name = re.sub(r'\s+', ' ', name).strip()

    if len(name) > max_length:
        name = name[:max_length].rstrip()

    return name


def sanitize_color(color, default):
    """Return ``color`` if it is a #RRGGBB hex string, else ``default``."""
    if isinstance(color, str) and _HEX_COLOR.match(color.strip()):
        return color.strip().upper()
    return default
