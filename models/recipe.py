"""
Recipe Models

Contains the Recipe and RecipeIngredient models for managing
recipes ("fichas técnicas") and their ingredient lines.
"""

from services.records import IngredientLine, RecipeInput

from .base import db
from .product import utcnow


class Recipe(db.Model):
    """
    Recipe with yield and pricing metadata.

    ``total_cost`` is derived: it is rewritten by services.recalc in the same
    transaction as any change that affects it, and never set from user input.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(50), default='', index=True)
    prep_time = db.Column(db.Integer, nullable=True)  # minutes
    portions = db.Column(db.Integer, nullable=False, default=1)
    desired_margin = db.Column(db.Numeric(5, 2), nullable=True)  # percent, 0-100
    suggested_sale_price = db.Column(db.Numeric(12, 2), nullable=True)
    total_cost = db.Column(db.Numeric(12, 4), nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)
    active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    ingredients = db.relationship(
        'RecipeIngredient', backref='recipe', lazy=True,
        cascade='all, delete-orphan', order_by='RecipeIngredient.position',
    )

    def to_costing_input(self):
        return RecipeInput(
            name=self.name,
            lines=tuple(ri.to_line() for ri in self.ingredients),
            portions=self.portions or 1,
            desired_margin=self.desired_margin,
            suggested_sale_price=self.suggested_sale_price,
        )


class RecipeIngredient(db.Model):
    """Join table linking recipes to products with quantity and unit."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id', ondelete='RESTRICT'), nullable=False, index=True)
    quantity = db.Column(db.Numeric(12, 4), nullable=False)
    unit = db.Column(db.String(10), nullable=False)
    note = db.Column(db.String(500), default='')
    position = db.Column(db.Integer, nullable=False, default=0)  # display order only
    product = db.relationship('Product')

    def to_line(self):
        return IngredientLine(
            product_id=self.product_id,
            quantity=self.quantity,
            unit=self.unit,
            note=self.note or None,
        )
