from decimal import Decimal

import pytest

from app import create_app
from models import db as _db, Product, Recipe, RecipeIngredient
from services.recalc import refresh_recipe_cost


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def catalog(db):
    """Flour priced per kg, milk per L, eggs per dozen, and an inactive butter."""
    products = {
        'flour': Product(name='Farinha de Trigo', unit='kg', unit_price=Decimal('8.50')),
        'milk': Product(name='Leite Integral', unit='L', unit_price=Decimal('12.00')),
        'eggs': Product(name='Ovos', unit='dz', unit_price=Decimal('18.00')),
        'butter': Product(name='Manteiga', unit='kg', unit_price=Decimal('40.00'), active=False),
    }
    db.session.add_all(products.values())
    db.session.commit()
    return products


@pytest.fixture
def pancake(db, catalog):
    """0.5 kg flour + 0.2 L milk, 2 portions, 30% margin -> total 6.65."""
    recipe = Recipe(name='Panqueca', portions=2, desired_margin=Decimal('30'))
    recipe.ingredients.append(RecipeIngredient(
        product_id=catalog['flour'].id, quantity=Decimal('0.5'), unit='kg', position=0))
    recipe.ingredients.append(RecipeIngredient(
        product_id=catalog['milk'].id, quantity=Decimal('0.2'), unit='L', position=1))
    db.session.add(recipe)
    refresh_recipe_cost(recipe, db.session)
    db.session.commit()
    return recipe
