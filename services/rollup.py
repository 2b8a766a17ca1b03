"""
Recipe Rollup Service

The single costing function for recipes. The preview endpoint, the
persisted recompute and the reports all call ``rollup``; nothing else in
the application re-derives recipe cost.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Context, Decimal, ROUND_HALF_EVEN, localcontext
from typing import Optional, Tuple

from constants import UNITS

from .classification import classify
from .cost import line_cost
from .errors import ProductNotFound
from .parsing import to_decimal

# Fixed arithmetic context so results never depend on the caller's context
COST_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


@dataclass(frozen=True)
class LineCost:
    product_id: object
    product_name: str
    quantity: Decimal
    unit: str
    priced_unit: str
    cost: Decimal
    note: Optional[str] = None


@dataclass(frozen=True)
class CostBreakdown:
    """
    Derived costs for one recipe at current product prices.

    ``effective_sale_price``, ``gross_margin`` and ``cmv_percentage`` are
    None when no positive sale price is known.
    """
    total_cost: Decimal
    cost_per_portion: Decimal
    effective_sale_price: Optional[Decimal]
    gross_margin: Optional[Decimal]
    cmv_percentage: Optional[Decimal]
    classification: str
    lines: Tuple[LineCost, ...] = field(default_factory=tuple)
    inactive_product_ids: Tuple[object, ...] = field(default_factory=tuple)

    @property
    def cmv_computable(self):
        return self.cmv_percentage is not None


def _resolver(product_lookup):
    if isinstance(product_lookup, Mapping):
        return product_lookup.get
    return product_lookup


def _optional_decimal(value):
    if value is None or value == '':
        return None
    return to_decimal(value)


def effective_sale_price(total_cost, suggested_sale_price=None, desired_margin=None):
    """
    Sale price used for CMV.

    An explicit positive sale price wins. Otherwise a margin m in (0, 100)
    derives total_cost / (1 - m/100). Anything else gives None.
    """
    with localcontext(COST_CONTEXT):
        suggested = _optional_decimal(suggested_sale_price)
        if suggested is not None and suggested > 0:
            return suggested

        margin = _optional_decimal(desired_margin)
        if margin is not None and ZERO < margin < HUNDRED:
            price = total_cost / (1 - margin / HUNDRED)
            if price > 0:
                return price
        return None


def rollup(recipe, product_lookup, thresholds=None, strict_inactive=False, table=UNITS):
    """
    Compute the CostBreakdown of a recipe.

    Args:
        recipe: RecipeInput
        product_lookup: callable ``product_id -> ProductSnapshot | None``,
            or a mapping of product ids to snapshots
        thresholds: CmvThresholds for classification (defaults if None)
        strict_inactive: raise InactiveProduct for inactive products

    Raises:
        ProductNotFound, IncompatibleDimension, UnknownUnit,
        InvalidQuantity, InvalidPrice, InactiveProduct. No partial
        breakdown is ever returned.
    """
    resolve = _resolver(product_lookup)

    with localcontext(COST_CONTEXT):
        lines = []
        inactive = []
        total_cost = ZERO
        for line in recipe.lines:
            product = resolve(line.product_id)
            if product is None:
                raise ProductNotFound(line.product_id)

            cost = line_cost(line, product, strict_inactive=strict_inactive, table=table)
            total_cost += cost

            if not product.active and product.id not in inactive:
                inactive.append(product.id)
            lines.append(LineCost(
                product_id=product.id,
                product_name=product.name,
                quantity=to_decimal(line.quantity),
                unit=line.unit,
                priced_unit=product.unit,
                cost=cost,
                note=line.note,
            ))

        portions = max(int(recipe.portions or 1), 1)
        cost_per_portion = total_cost / portions

        sale_price = effective_sale_price(
            total_cost,
            suggested_sale_price=recipe.suggested_sale_price,
            desired_margin=recipe.desired_margin,
        )

        cmv_percentage = None
        gross_margin = None
        if sale_price is not None:
            cmv_percentage = total_cost / sale_price * HUNDRED
            gross_margin = sale_price - total_cost

    return CostBreakdown(
        total_cost=total_cost,
        cost_per_portion=cost_per_portion,
        effective_sale_price=sale_price,
        gross_margin=gross_margin,
        cmv_percentage=cmv_percentage,
        classification=classify(cmv_percentage, thresholds),
        lines=tuple(lines),
        inactive_product_ids=tuple(inactive),
    )
