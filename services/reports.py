"""
Report Service

Aggregates recipe breakdowns into the CMV report and purchases into the
monthly purchase summary. Breakdowns come from ``rollup``; this module
never re-derives recipe cost.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from constants import CLASSIFICATION_LABELS, DEFAULT_CMV_MONTHLY_TARGET

from .parsing import to_decimal

ZERO = Decimal('0')
HUNDRED = Decimal('100')


@dataclass(frozen=True)
class RecipeCmv:
    recipe_id: object
    name: str
    total_cost: Decimal
    sale_price: Optional[Decimal]
    gross_margin: Optional[Decimal]
    cmv_percentage: Optional[Decimal]
    classification: str


@dataclass(frozen=True)
class CmvReport:
    recipe_count: int
    computable_count: int
    total_cost: Decimal
    total_sale_price: Decimal
    gross_margin: Decimal
    average_cmv: Optional[Decimal]
    weighted_cmv: Optional[Decimal]
    target_cmv: Decimal
    best: Optional[RecipeCmv]
    worst: Optional[RecipeCmv]
    by_classification: dict
    above_target: Tuple[RecipeCmv, ...] = field(default_factory=tuple)
    errors: Tuple[dict, ...] = field(default_factory=tuple)
    rows: Tuple[RecipeCmv, ...] = field(default_factory=tuple)


def recipe_cmv(recipe_id, name, breakdown):
    return RecipeCmv(
        recipe_id=recipe_id,
        name=name,
        total_cost=breakdown.total_cost,
        sale_price=breakdown.effective_sale_price,
        gross_margin=breakdown.gross_margin,
        cmv_percentage=breakdown.cmv_percentage,
        classification=breakdown.classification,
    )


def cmv_report(rows, target=DEFAULT_CMV_MONTHLY_TARGET, errors=()):
    """
    Summarize per-recipe CMV.

    ``average_cmv`` is the plain mean over recipes with a computable CMV;
    ``weighted_cmv`` is total cost over total sale price of those recipes.
    Recipes whose rollup failed are passed in ``errors`` and left out of
    every aggregate rather than counted at a partial cost.
    """
    rows = list(rows)
    target = to_decimal(target)
    computable = [row for row in rows if row.cmv_percentage is not None]

    total_cost = sum((row.total_cost for row in rows), ZERO)
    computable_cost = sum((row.total_cost for row in computable), ZERO)
    total_sale = sum((row.sale_price for row in computable), ZERO)

    average_cmv = None
    weighted_cmv = None
    best = worst = None
    if computable:
        average_cmv = sum((row.cmv_percentage for row in computable), ZERO) / len(computable)
        if total_sale > 0:
            weighted_cmv = computable_cost / total_sale * HUNDRED
        best = min(computable, key=lambda row: row.cmv_percentage)
        worst = max(computable, key=lambda row: row.cmv_percentage)

    counts = Counter(row.classification for row in rows)
    by_classification = {label: counts.get(label, 0) for label in CLASSIFICATION_LABELS}

    above_target = tuple(
        sorted((row for row in computable if row.cmv_percentage > target),
               key=lambda row: row.cmv_percentage, reverse=True)
    )

    return CmvReport(
        recipe_count=len(rows),
        computable_count=len(computable),
        total_cost=total_cost,
        total_sale_price=total_sale,
        gross_margin=total_sale - computable_cost,
        average_cmv=average_cmv,
        weighted_cmv=weighted_cmv,
        target_cmv=target,
        best=best,
        worst=worst,
        by_classification=by_classification,
        above_target=above_target,
        errors=tuple(errors),
        rows=tuple(rows),
    )


@dataclass(frozen=True)
class PurchaseSummary:
    purchase_count: int
    total_value: Decimal
    month_value: Decimal
    month: Optional[Tuple[int, int]]
    top_products: List[dict] = field(default_factory=list)


def purchase_summary(purchases, month=None, top=5):
    """
    Totals over ``purchases``: overall value, value within ``month``
    ((year, month) tuple) and the products with the highest spend.
    """
    purchases = list(purchases)
    total_value = sum((to_decimal(p.total_value) for p in purchases), ZERO)

    month_value = ZERO
    if month is not None:
        year, month_number = month
        month_value = sum(
            (to_decimal(p.total_value) for p in purchases
             if p.purchase_date.year == year and p.purchase_date.month == month_number),
            ZERO,
        )

    spend = {}
    for purchase in purchases:
        for item in purchase.items:
            entry = spend.setdefault(item.product_id, {
                'product_id': item.product_id,
                'name': item.product.name if item.product is not None else None,
                'quantity': ZERO,
                'spend': ZERO,
            })
            entry['quantity'] += to_decimal(item.quantity)
            entry['spend'] += to_decimal(item.subtotal)
    top_products = sorted(spend.values(), key=lambda entry: entry['spend'], reverse=True)[:top]

    return PurchaseSummary(
        purchase_count=len(purchases),
        total_value=total_value,
        month_value=month_value,
        month=month,
        top_products=top_products,
    )
