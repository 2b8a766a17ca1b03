"""
Formatting Service

Presentation helpers. This is the only place costs get rounded for display;
the engine itself never rounds.
"""

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP

from .parsing import to_decimal

CENT = Decimal('0.01')

# Persisted derived costs (recipe.total_cost) keep four places
STORAGE_QUANTUM = Decimal('0.0001')

CURRENCY_SYMBOLS = {'BRL': 'R$', 'USD': 'US$', 'EUR': '€'}


def quantize_money(value, places=2):
    """Round a money value for display (half-up, as on a receipt)."""
    if value is None:
        return None
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def quantize_for_storage(value):
    """Round a derived cost for persistence (banker's rounding, 4 places)."""
    if value is None:
        return None
    return to_decimal(value).quantize(STORAGE_QUANTUM, rounding=ROUND_HALF_EVEN)


def _group_thousands(digits, sep='.'):
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return sep.join(groups)


def format_number(value, decimals=2):
    """Format in Brazilian notation: 1234.5 -> '1.234,50'."""
    rounded = quantize_money(value, decimals)
    sign = '-' if rounded < 0 else ''
    text = f'{abs(rounded):.{decimals}f}'
    whole, _, frac = text.partition('.')
    result = _group_thousands(whole)
    if decimals > 0:
        result = f'{result},{frac}'
    return sign + result


def format_currency(value, currency='BRL'):
    """Format a money value: Decimal('1234.565') -> 'R$ 1.234,57'."""
    if value is None:
        return '-'
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    text = format_number(value, 2)
    if text.startswith('-'):
        return f'-{symbol} {text[1:]}'
    return f'{symbol} {text}'


def format_percentage(value, decimals=1):
    """Format a percentage: Decimal('28.46') -> '28,5%'."""
    if value is None:
        return '-'
    return f'{format_number(value, decimals)}%'


def decimal_str(value, places=None):
    """JSON-safe string for a Decimal; optionally rounded for display."""
    if value is None:
        return None
    if places is not None:
        value = quantize_money(value, places)
    return str(value)
