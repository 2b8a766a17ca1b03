"""
Purchase Service

Functions for totalling supplier invoices and recording them. Recording a
purchase adds to each product's stock and updates its current price,
which in turn invalidates the cost of every recipe using it.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from models import Product, Purchase, PurchaseItem

from .errors import InvalidPrice, InvalidQuantity, ProductNotFound
from .formatting import quantize_for_storage, quantize_money
from .parsing import to_decimal
from .recalc import refresh_dependent_recipes

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


@dataclass(frozen=True)
class PurchaseLine:
    product_id: object
    quantity: Decimal
    unit_price: Decimal


def item_subtotal(quantity, unit_price):
    quantity = to_decimal(quantity)
    unit_price = to_decimal(unit_price)
    if not quantity.is_finite() or quantity <= 0:
        raise InvalidQuantity(quantity)
    if not unit_price.is_finite() or unit_price < 0:
        raise InvalidPrice(unit_price)
    return quantity * unit_price


def purchase_total(lines, discount=ZERO, taxes=ZERO):
    """
    Invoice total: sum(quantity * unit_price) - discount + taxes.

    Discount and taxes must not be negative.
    """
    discount = to_decimal(discount or ZERO)
    taxes = to_decimal(taxes or ZERO)
    if discount < 0:
        raise InvalidPrice(discount)
    if taxes < 0:
        raise InvalidPrice(taxes)
    subtotal = sum((item_subtotal(line.quantity, line.unit_price) for line in lines), ZERO)
    return subtotal - discount + taxes


def updated_average_cost(previous_average, previous_qty, quantity, unit_price):
    """Weighted average of the previous average cost and a new purchase."""
    if previous_average is None or not previous_qty:
        return to_decimal(unit_price)
    previous_qty = to_decimal(previous_qty)
    quantity = to_decimal(quantity)
    total_qty = previous_qty + quantity
    return (to_decimal(previous_average) * previous_qty + to_decimal(unit_price) * quantity) / total_qty


def _purchased_quantity(session, product_id):
    rows = session.query(PurchaseItem.quantity).filter(PurchaseItem.product_id == product_id).all()
    return sum((to_decimal(row[0]) for row in rows), ZERO)


def record_purchase(session, purchase_date, lines, supplier_id=None, invoice_number='',
                    discount=ZERO, taxes=ZERO, notes='', update_prices=True):
    """
    Create a Purchase with its items inside the current transaction.

    Each line adds its quantity to the product's ``current_stock``.
    When ``update_prices`` is set, each product's ``unit_price`` becomes the
    price paid, its average cost is updated, and dependent recipes are
    recomputed before the caller commits.
    """
    total = purchase_total(lines, discount, taxes)

    purchase = Purchase(
        supplier_id=supplier_id,
        purchase_date=purchase_date,
        invoice_number=invoice_number or '',
        total_value=quantize_money(total),
        discount=to_decimal(discount or ZERO),
        taxes=to_decimal(taxes or ZERO),
        notes=notes or '',
    )
    session.add(purchase)

    changed = {}
    for line in lines:
        product = session.get(Product, line.product_id)
        if product is None:
            raise ProductNotFound(line.product_id)

        product.current_stock = to_decimal(product.current_stock or ZERO) + to_decimal(line.quantity)

        if update_prices:
            previous_qty = _purchased_quantity(session, product.id)
            product.average_cost = quantize_for_storage(updated_average_cost(
                product.average_cost, previous_qty, line.quantity, line.unit_price))
            if product.unit_price is None or to_decimal(product.unit_price) != to_decimal(line.unit_price):
                product.unit_price = to_decimal(line.unit_price)
                changed[product.id] = product

        purchase.items.append(PurchaseItem(
            product_id=product.id,
            quantity=to_decimal(line.quantity),
            unit_price=to_decimal(line.unit_price),
            subtotal=quantize_for_storage(item_subtotal(line.quantity, line.unit_price)),
        ))
        session.flush()

    for product in changed.values():
        refresh_dependent_recipes(product, session)

    logger.info("Recorded purchase with %d item(s), total=%s, %d price change(s)",
                len(lines), purchase.total_value, len(changed))
    return purchase
