"""
Validation Constants

Contains bounds and whitelist values for validating user input before it
reaches the database or the cost engine.
"""

from decimal import Decimal

# Valid values for the status filter on list endpoints
VALID_STATUS_FILTERS = {'active', 'inactive', 'all'}

# Numeric bounds
MAX_QUANTITY = Decimal('99999')
MAX_PRICE = Decimal('9999999')
MAX_PORTIONS = 10000
MAX_PREP_TIME = 100000
MIN_MARGIN = Decimal('0')
MAX_MARGIN = Decimal('100')

# Decimal places the Numeric columns keep; finer input is rejected
QUANTITY_PLACES = 4
PRICE_PLACES = 4
MONEY_PLACES = 2
MARGIN_PLACES = 2

# Minimum name length
MIN_NAME_LENGTH = 2

# Maximum field lengths for security
MAX_LENGTHS = {
    'product_name': 100,
    'recipe_name': 100,
    'category_name': 50,
    'supplier_name': 100,
    'description': 2000,
    'note': 500,
    'internal_code': 50,
    'invoice_number': 50,
    'contact': 100,
}

# Category colors are stored as #RRGGBB
DEFAULT_CATEGORY_COLOR = '#3B82F6'
