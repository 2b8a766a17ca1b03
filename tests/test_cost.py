import logging
from decimal import Decimal

import pytest

from services import (
    IncompatibleDimension, InactiveProduct, IngredientLine, InvalidPrice, InvalidQuantity,
    ProductSnapshot, UnknownUnit, convert_to_priced_unit, line_cost,
)

FLOUR = ProductSnapshot(id=1, name='Farinha', unit='kg', unit_price=Decimal('8.50'))
EGGS = ProductSnapshot(id=2, name='Ovos', unit='dz', unit_price=Decimal('18.00'))


def test_same_unit_multiplies_directly():
    line = IngredientLine(product_id=1, quantity=Decimal('0.5'), unit='kg')
    assert line_cost(line, FLOUR) == Decimal('4.25')


def test_converts_to_priced_unit():
    line = IngredientLine(product_id=1, quantity=Decimal('500'), unit='g')
    assert line_cost(line, FLOUR) == Decimal('4.25')


def test_count_units_convert_through_dozen():
    line = IngredientLine(product_id=2, quantity=Decimal('3'), unit='un')
    assert line_cost(line, EGGS) == Decimal('4.5')


def test_convert_to_priced_unit_skips_matching_unit():
    assert convert_to_priced_unit(Decimal('2'), 'kg', FLOUR) == Decimal('2')
    assert convert_to_priced_unit(Decimal('250'), 'g', FLOUR) == Decimal('0.25')


def test_zero_price_costs_nothing():
    free = ProductSnapshot(id=3, name='Água', unit='L', unit_price=Decimal('0'))
    line = IngredientLine(product_id=3, quantity=Decimal('1'), unit='L')
    assert line_cost(line, free) == 0


@pytest.mark.parametrize('quantity', [Decimal('0'), Decimal('-1'), Decimal('NaN'), Decimal('Infinity'), 'abc'])
def test_invalid_quantity(quantity):
    line = IngredientLine(product_id=1, quantity=quantity, unit='kg')
    with pytest.raises(InvalidQuantity) as exc:
        line_cost(line, FLOUR)
    assert exc.value.details['product_id'] == 1


def test_negative_price_is_rejected():
    bad = ProductSnapshot(id=4, name='Erro', unit='kg', unit_price=Decimal('-0.01'))
    line = IngredientLine(product_id=4, quantity=Decimal('1'), unit='kg')
    with pytest.raises(InvalidPrice):
        line_cost(line, bad)


def test_cross_dimension_line_raises():
    line = IngredientLine(product_id=1, quantity=Decimal('1'), unit='L')
    with pytest.raises(IncompatibleDimension):
        line_cost(line, FLOUR)


def test_unknown_line_unit_raises():
    line = IngredientLine(product_id=1, quantity=Decimal('1'), unit='xícara')
    with pytest.raises(UnknownUnit):
        line_cost(line, FLOUR)


def test_unknown_unit_raises_even_when_units_match():
    jar = ProductSnapshot(id=3, name='Pimenta', unit='xícara', unit_price=Decimal('2'))
    line = IngredientLine(product_id=3, quantity=Decimal('1'), unit='xícara')
    with pytest.raises(UnknownUnit):
        line_cost(line, jar)
    with pytest.raises(UnknownUnit):
        convert_to_priced_unit(Decimal('1'), 'xícara', jar)


def test_inactive_product_warns_by_default(caplog):
    butter = ProductSnapshot(id=5, name='Manteiga', unit='kg', unit_price=Decimal('40'), active=False)
    line = IngredientLine(product_id=5, quantity=Decimal('0.1'), unit='kg')
    with caplog.at_level(logging.WARNING, logger='services.cost'):
        assert line_cost(line, butter) == Decimal('4.0')
    assert 'inactive product' in caplog.text


def test_inactive_product_raises_in_strict_mode():
    butter = ProductSnapshot(id=5, name='Manteiga', unit='kg', unit_price=Decimal('40'), active=False)
    line = IngredientLine(product_id=5, quantity=Decimal('0.1'), unit='kg')
    with pytest.raises(InactiveProduct) as exc:
        line_cost(line, butter, strict_inactive=True)
    assert exc.value.to_dict()['error'] == 'InactiveProduct'
