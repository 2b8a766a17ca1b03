"""
Unit Conversion Service

Functions for normalizing unit symbols and converting quantities between
units of the same dimension.
"""

from constants import UNITS, UNIT_MAPPINGS

from .errors import IncompatibleDimension, UnknownUnit
from .parsing import to_decimal


def normalize_unit(unit, table=UNITS):
    """
    Map a free-text unit ("Gramas", "kg", "litros") to its canonical symbol.

    Raises UnknownUnit when the text matches nothing in the table.
    """
    if unit is None:
        raise UnknownUnit(unit)
    text = str(unit).strip()
    if text in table:
        return text
    canonical = UNIT_MAPPINGS.get(text.lower())
    if canonical is None or canonical not in table:
        raise UnknownUnit(unit)
    return canonical


def _entry(unit, table):
    try:
        return table[unit]
    except KeyError:
        raise UnknownUnit(unit) from None


def factor_to_base(unit, table=UNITS):
    """Factor that converts one ``unit`` into the base unit of its dimension."""
    return _entry(unit, table)[1]


def dimension_of(unit, table=UNITS):
    """Dimension (mass, volume, count) of ``unit``."""
    return _entry(unit, table)[0]


def same_dimension(unit_a, unit_b, table=UNITS):
    return dimension_of(unit_a, table) == dimension_of(unit_b, table)


def convert(quantity, from_unit, to_unit, table=UNITS):
    """
    Convert ``quantity`` from ``from_unit`` to ``to_unit``.

    Converts through the dimension's base unit:
    quantity * factor(from_unit) / factor(to_unit)

    Raises:
        UnknownUnit: either unit is not in the table
        IncompatibleDimension: the units measure different things (kg -> L)
    """
    quantity = to_decimal(quantity)
    from_dimension, from_factor = _entry(from_unit, table)
    to_dimension, to_factor = _entry(to_unit, table)

    if from_dimension != to_dimension:
        raise IncompatibleDimension(from_unit, to_unit, from_dimension, to_dimension)

    if from_unit == to_unit:
        return quantity

    return quantity * from_factor / to_factor
