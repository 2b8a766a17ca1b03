"""
Services Package

The recipe cost engine and the business logic around it.

Only the database-free modules are re-exported here. ``services.recalc``
and ``services.purchases`` work on the ORM models and are imported
directly, since the models themselves import ``services.records``.
"""

from .errors import (
    CostError,
    ProductNotFound,
    IncompatibleDimension,
    UnknownUnit,
    InvalidQuantity,
    InvalidPrice,
    InactiveProduct,
    ProductInUse,
)

from .records import (
    ProductSnapshot,
    IngredientLine,
    RecipeInput,
)

from .parsing import (
    to_decimal,
    parse_decimal,
    safe_int,
)

from .units import (
    normalize_unit,
    factor_to_base,
    dimension_of,
    convert,
)

from .cost import (
    convert_to_priced_unit,
    line_cost,
)

from .classification import (
    CmvThresholds,
    classify,
)

from .rollup import (
    LineCost,
    CostBreakdown,
    effective_sale_price,
    rollup,
)

from .formatting import (
    quantize_money,
    quantize_for_storage,
    format_currency,
    format_percentage,
)

__all__ = [
    # Errors
    'CostError',
    'ProductNotFound',
    'IncompatibleDimension',
    'UnknownUnit',
    'InvalidQuantity',
    'InvalidPrice',
    'InactiveProduct',
    'ProductInUse',
    # Records
    'ProductSnapshot',
    'IngredientLine',
    'RecipeInput',
    # Parsing
    'to_decimal',
    'parse_decimal',
    'safe_int',
    # Units
    'normalize_unit',
    'factor_to_base',
    'dimension_of',
    'convert',
    # Cost
    'convert_to_priced_unit',
    'line_cost',
    # Classification
    'CmvThresholds',
    'classify',
    # Rollup
    'LineCost',
    'CostBreakdown',
    'effective_sale_price',
    'rollup',
    # Formatting
    'quantize_money',
    'quantize_for_storage',
    'format_currency',
    'format_percentage',
]
