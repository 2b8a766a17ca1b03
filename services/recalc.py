"""
Recalculation Service

Keeps the persisted ``recipe.total_cost`` consistent with current product
prices.

Readers never trust the persisted value for costing: every read endpoint
calls ``rollup`` live. The persisted column exists for sorting and for
external readers, and is rewritten inside the same session transaction as
the write that invalidates it. Callers flush their change, call the refresh
function, then commit; a CostError from the refresh means the caller must
roll back, so a stale or half-computed cost is never committed.

Events that invalidate a recipe's derived cost:
- ingredient line added, removed, or its product/quantity/unit changed
- recipe portions, desired margin or suggested sale price changed
- a referenced product's unit, unit price or active flag changed
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from models import Product, Recipe, RecipeIngredient

from .formatting import quantize_for_storage
from .rollup import rollup

logger = logging.getLogger(__name__)

# Recipe fields whose change invalidates the derived cost
RECIPE_COST_FIELDS = frozenset({'portions', 'desired_margin', 'suggested_sale_price'})

# Product fields whose change invalidates every dependent recipe
PRODUCT_COST_FIELDS = frozenset({'unit', 'unit_price', 'active'})


def recipe_needs_refresh(changed_fields, lines_changed=False):
    """True when a recipe edit touching ``changed_fields`` invalidates its cost."""
    return lines_changed or bool(RECIPE_COST_FIELDS & set(changed_fields))


def product_needs_refresh(changed_fields):
    """True when a product edit touching ``changed_fields`` invalidates dependent recipes."""
    return bool(PRODUCT_COST_FIELDS & set(changed_fields))


def session_product_lookup(session):
    """
    Product lookup reading through ``session``.

    Sees rows flushed earlier in the same transaction, so a refresh after a
    price edit prices with the new value.
    """
    cache = {}

    def lookup(product_id):
        if product_id not in cache:
            product = session.get(Product, product_id)
            cache[product_id] = product.to_snapshot() if product is not None else None
        return cache[product_id]

    return lookup


def compute_breakdown(recipe, session, thresholds=None, strict_inactive=False):
    """Live breakdown of a persisted recipe at current prices."""
    return rollup(
        recipe.to_costing_input(),
        session_product_lookup(session),
        thresholds=thresholds,
        strict_inactive=strict_inactive,
    )


def refresh_recipe_cost(recipe, session, thresholds=None, strict_inactive=False):
    """
    Recompute and store ``recipe.total_cost``.

    Must run inside the transaction of the triggering write. Errors
    propagate; the caller rolls back. The returned breakdown is the one the
    stored cost came from, so callers can answer with it after committing.
    """
    session.flush()
    breakdown = compute_breakdown(recipe, session, thresholds=thresholds,
                                  strict_inactive=strict_inactive)
    recipe.total_cost = quantize_for_storage(breakdown.total_cost)
    logger.info("Recomputed cost for recipe id=%s: total_cost=%s", recipe.id, recipe.total_cost)
    return breakdown


def recipes_using_product(session, product_id):
    stmt = (
        select(Recipe)
        .join(RecipeIngredient, RecipeIngredient.recipe_id == Recipe.id)
        .where(RecipeIngredient.product_id == product_id)
        .options(joinedload(Recipe.ingredients))
        .order_by(Recipe.id)
    )
    return list(session.scalars(stmt).unique())


def refresh_dependent_recipes(product, session, strict_inactive=False):
    """
    Recompute every recipe that uses ``product``.

    Returns the refreshed recipes. The first failing recipe aborts the whole
    refresh; the caller rolls back the product edit with it.
    """
    session.flush()
    recipes = recipes_using_product(session, product.id)
    for recipe in recipes:
        try:
            refresh_recipe_cost(recipe, session, strict_inactive=strict_inactive)
        except Exception:
            logger.warning("Recompute failed for recipe id=%s after change to product id=%s",
                           recipe.id, product.id)
            raise
    return recipes
