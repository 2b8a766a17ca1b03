"""
Cost Calculation Service

Prices a single recipe ingredient line against a product's current price.
"""

import logging

from constants import UNITS

from .errors import InactiveProduct, InvalidPrice, InvalidQuantity
from .parsing import to_decimal
from .units import convert, dimension_of

logger = logging.getLogger(__name__)


def convert_to_priced_unit(quantity, from_unit, product, table=UNITS):
    """
    Convert a recipe quantity into the unit the product's price is quoted in.

    No conversion happens when the units already match, though the unit
    must still be in the table. Otherwise the quantity goes through the
    unit table, so 500 g of a product priced per kg becomes 0.5.
    """
    if from_unit == product.unit:
        dimension_of(from_unit, table)
        return quantity
    return convert(quantity, from_unit, product.unit, table)


def line_cost(line, product, strict_inactive=False, table=UNITS):
    """
    Calculate the cost of one ingredient line.

    Args:
        line: IngredientLine (product_id, quantity, unit)
        product: ProductSnapshot the line references
        strict_inactive: raise InactiveProduct instead of warning

    Returns:
        Decimal cost, unrounded

    Raises:
        InvalidQuantity: quantity is zero, negative or not finite
        InvalidPrice: unit price is negative or not finite
        InactiveProduct: product inactive and strict_inactive set
        IncompatibleDimension / UnknownUnit: from unit conversion
    """
    try:
        quantity = to_decimal(line.quantity)
    except (TypeError, ValueError):
        raise InvalidQuantity(line.quantity, product_id=line.product_id) from None
    if not quantity.is_finite() or quantity <= 0:
        raise InvalidQuantity(line.quantity, product_id=line.product_id)

    try:
        unit_price = to_decimal(product.unit_price)
    except (TypeError, ValueError):
        raise InvalidPrice(product.unit_price, product_id=product.id) from None
    if not unit_price.is_finite() or unit_price < 0:
        raise InvalidPrice(product.unit_price, product_id=product.id)

    if not product.active:
        if strict_inactive:
            raise InactiveProduct(product.id, product.name)
        logger.warning("Pricing recipe line with inactive product id=%s name=%s",
                       product.id, product.name)

    priced_qty = convert_to_priced_unit(quantity, line.unit, product, table)
    return priced_qty * unit_price
