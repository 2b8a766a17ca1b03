from decimal import Decimal

import pytest

from models import Recipe, RecipeIngredient
from services import CmvThresholds, IncompatibleDimension
from services.recalc import (
    compute_breakdown, product_needs_refresh, recipe_needs_refresh, recipes_using_product,
    refresh_dependent_recipes, refresh_recipe_cost, session_product_lookup,
)


def test_recipe_trigger_fields():
    assert recipe_needs_refresh({'portions'})
    assert recipe_needs_refresh({'suggested_sale_price', 'name'})
    assert not recipe_needs_refresh({'name', 'description', 'prep_time'})
    assert recipe_needs_refresh({'name'}, lines_changed=True)


def test_product_trigger_fields():
    assert product_needs_refresh({'unit_price'})
    assert product_needs_refresh({'active'})
    assert product_needs_refresh(['unit', 'name'])
    assert not product_needs_refresh({'name', 'category_id', 'supplier_id'})
    assert not product_needs_refresh({'current_stock', 'minimum_stock', 'expiry_date'})


def test_persisted_cost_matches_live_rollup(db, pancake):
    recipe = db.session.get(Recipe, pancake.id)
    assert recipe.total_cost == Decimal('6.6500')
    breakdown = compute_breakdown(recipe, db.session)
    assert breakdown.total_cost == Decimal('6.65')
    assert breakdown.classification == 'high'


def test_session_lookup_sees_flushed_price(db, catalog):
    flour = catalog['flour']
    flour.unit_price = Decimal('10.00')
    db.session.flush()
    lookup = session_product_lookup(db.session)
    assert lookup(flour.id).unit_price == Decimal('10.00')
    assert lookup(12345) is None


def test_recipes_using_product(db, catalog, pancake):
    assert [r.id for r in recipes_using_product(db.session, catalog['flour'].id)] == [pancake.id]
    assert recipes_using_product(db.session, catalog['eggs'].id) == []


def test_price_change_refreshes_dependents(db, catalog, pancake):
    milk = catalog['milk']
    milk.unit_price = Decimal('15.00')
    refreshed = refresh_dependent_recipes(milk, db.session)
    db.session.commit()

    assert [r.id for r in refreshed] == [pancake.id]
    assert db.session.get(Recipe, pancake.id).total_cost == Decimal('7.2500')


def test_refresh_failure_leaves_nothing_committed(db, catalog, pancake):
    flour = catalog['flour']
    flour.unit = 'L'
    with pytest.raises(IncompatibleDimension):
        refresh_dependent_recipes(flour, db.session)
    db.session.rollback()

    assert db.session.get(Recipe, pancake.id).total_cost == Decimal('6.6500')
    assert catalog['flour'].unit == 'kg'


def test_refresh_after_line_change(db, catalog, pancake):
    recipe = db.session.get(Recipe, pancake.id)
    recipe.ingredients.append(RecipeIngredient(
        product_id=catalog['eggs'].id, quantity=Decimal('6'), unit='un', position=2))
    refresh_recipe_cost(recipe, db.session)
    db.session.commit()

    assert db.session.get(Recipe, pancake.id).total_cost == Decimal('15.6500')


def test_refresh_returns_the_stored_breakdown(db, pancake):
    recipe = db.session.get(Recipe, pancake.id)
    recipe.portions = 5
    thresholds = CmvThresholds.from_mapping({'excellentMax': 80, 'goodMax': 90})
    breakdown = refresh_recipe_cost(recipe, db.session, thresholds=thresholds)
    db.session.commit()

    assert breakdown.total_cost == Decimal('6.65')
    assert breakdown.cost_per_portion == Decimal('1.33')
    assert breakdown.classification == 'excellent'
    assert recipe.total_cost == Decimal('6.6500')
