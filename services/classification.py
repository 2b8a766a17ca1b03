"""
CMV Classification Service

Maps a CMV percentage onto a qualitative label using a per-deployment
threshold table.
"""

from dataclasses import dataclass
from decimal import Decimal

from constants import (
    EXCELLENT, GOOD, HIGH, NOT_APPLICABLE, DEFAULT_CMV_THRESHOLDS,
)

from .parsing import parse_decimal


@dataclass(frozen=True)
class CmvThresholds:
    """
    Inclusive upper bounds for the CMV labels.

    cmv <= excellent_max        -> excellent
    excellent_max < cmv <= good_max -> good
    cmv > good_max              -> high
    """
    excellent_max: Decimal = DEFAULT_CMV_THRESHOLDS['excellentMax']
    good_max: Decimal = DEFAULT_CMV_THRESHOLDS['goodMax']

    def __post_init__(self):
        excellent_max = parse_decimal(self.excellent_max)
        good_max = parse_decimal(self.good_max)
        if excellent_max is None or good_max is None:
            raise ValueError('CMV thresholds must be numbers')
        if excellent_max < 0 or good_max < 0:
            raise ValueError('CMV thresholds must not be negative')
        if excellent_max > good_max:
            raise ValueError(
                f'excellentMax ({excellent_max}) must not exceed goodMax ({good_max})'
            )
        object.__setattr__(self, 'excellent_max', excellent_max)
        object.__setattr__(self, 'good_max', good_max)

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a ``{excellentMax, goodMax}`` mapping; missing keys use the defaults."""
        mapping = mapping or {}
        return cls(
            excellent_max=mapping.get('excellentMax', DEFAULT_CMV_THRESHOLDS['excellentMax']),
            good_max=mapping.get('goodMax', DEFAULT_CMV_THRESHOLDS['goodMax']),
        )

    def to_mapping(self):
        return {'excellentMax': self.excellent_max, 'goodMax': self.good_max}


DEFAULT_THRESHOLDS = CmvThresholds()


def classify(cmv_percentage, thresholds=None):
    """Label a CMV percentage; ``None`` means not computable."""
    if cmv_percentage is None:
        return NOT_APPLICABLE
    thresholds = thresholds or DEFAULT_THRESHOLDS
    if cmv_percentage <= thresholds.excellent_max:
        return EXCELLENT
    if cmv_percentage <= thresholds.good_max:
        return GOOD
    return HIGH
