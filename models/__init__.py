"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .product import Category, Supplier, Product
from .recipe import Recipe, RecipeIngredient
from .purchase import Purchase, PurchaseItem
from .settings import Settings

__all__ = [
    'db',
    'Category',
    'Supplier',
    'Product',
    'Recipe',
    'RecipeIngredient',
    'Purchase',
    'PurchaseItem',
    'Settings',
]
