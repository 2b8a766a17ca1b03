from decimal import Decimal
from itertools import permutations

import pytest

from constants import UNITS, MASS, VOLUME, COUNT
from services import (
    IncompatibleDimension, UnknownUnit, convert, dimension_of, factor_to_base, normalize_unit,
)


def test_base_units_have_factor_one():
    assert factor_to_base('kg') == 1
    assert factor_to_base('L') == 1
    assert factor_to_base('un') == 1


def test_dimensions():
    assert dimension_of('g') == MASS
    assert dimension_of('ml') == VOLUME
    assert dimension_of('dz') == COUNT


def test_convert_grams_to_kilograms():
    assert convert(Decimal('500'), 'g', 'kg') == Decimal('0.5')


def test_convert_liters_to_milliliters():
    assert convert(Decimal('0.25'), 'L', 'ml') == Decimal('250')


def test_convert_dozen_to_units():
    assert convert(2, 'dz', 'un') == Decimal('24')


def test_convert_same_unit_is_identity():
    assert convert(Decimal('3.7'), 'kg', 'kg') == Decimal('3.7')


def test_convert_accepts_floats_without_binary_drift():
    assert convert(0.1, 'kg', 'g') == Decimal('100')


@pytest.mark.parametrize('from_unit,to_unit', [('kg', 'L'), ('g', 'ml'), ('L', 'un'), ('dz', 'kg')])
def test_cross_dimension_conversion_raises(from_unit, to_unit):
    with pytest.raises(IncompatibleDimension) as exc:
        convert(Decimal('1'), from_unit, to_unit)
    assert exc.value.kind == 'IncompatibleDimension'


def test_unknown_unit_raises():
    with pytest.raises(UnknownUnit):
        convert(1, 'cup', 'kg')
    with pytest.raises(UnknownUnit):
        dimension_of('xícara')


def test_round_trip_within_each_dimension():
    value = Decimal('123.456')
    for dimension in (MASS, VOLUME, COUNT):
        units = [unit for unit, (dim, _) in UNITS.items() if dim == dimension]
        for unit_a, unit_b in permutations(units, 2):
            back = convert(convert(value, unit_a, unit_b), unit_b, unit_a)
            assert abs(back - value) < Decimal('1e-20'), (unit_a, unit_b)


def test_custom_table_is_honoured():
    table = {'kg': (MASS, Decimal('1')), 'lb': (MASS, Decimal('0.45359237'))}
    assert convert(Decimal('1'), 'lb', 'kg', table=table) == Decimal('0.45359237')
    with pytest.raises(UnknownUnit):
        convert(1, 'g', 'kg', table=table)


@pytest.mark.parametrize('text,expected', [
    ('kg', 'kg'), ('KG', 'kg'), ('Gramas', 'g'), ('l', 'L'), ('litros', 'L'),
    ('ml', 'ml'), ('unidade', 'un'), ('dúzia', 'dz'), (' pacote ', 'pct'),
])
def test_normalize_unit(text, expected):
    assert normalize_unit(text) == expected


def test_normalize_unit_rejects_unknown():
    with pytest.raises(UnknownUnit):
        normalize_unit('colher')
    with pytest.raises(UnknownUnit):
        normalize_unit(None)
