"""
Constants Package

Static configuration data: the unit table, CMV classification defaults,
and input validation limits.
"""

from .units import (
    MASS,
    VOLUME,
    COUNT,
    DIMENSIONS,
    BASE_UNITS,
    UNITS,
    UNIT_LABELS,
    UNIT_MAPPINGS,
)

from .classification import (
    EXCELLENT,
    GOOD,
    HIGH,
    NOT_APPLICABLE,
    CLASSIFICATION_LABELS,
    DEFAULT_CMV_THRESHOLDS,
    DEFAULT_CMV_MONTHLY_TARGET,
    SETTING_EXCELLENT_MAX,
    SETTING_GOOD_MAX,
    SETTING_MONTHLY_TARGET,
)

from .validation import (
    VALID_STATUS_FILTERS,
    MAX_QUANTITY,
    MAX_PRICE,
    MAX_PORTIONS,
    MAX_PREP_TIME,
    MIN_MARGIN,
    MAX_MARGIN,
    QUANTITY_PLACES,
    PRICE_PLACES,
    MONEY_PLACES,
    MARGIN_PLACES,
    MIN_NAME_LENGTH,
    MAX_LENGTHS,
    DEFAULT_CATEGORY_COLOR,
)
