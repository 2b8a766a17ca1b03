"""
Product Models

Contains the Product catalog together with its Category and Supplier.
"""

from datetime import datetime, timezone

from services.records import ProductSnapshot

from .base import db


def utcnow():
    return datetime.now(timezone.utc)


class Category(db.Model):
    """Product grouping shown in catalog filters."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False, index=True)
    color = db.Column(db.String(7), default='#3B82F6')
    description = db.Column(db.Text, default='')
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)


class Supplier(db.Model):
    """Vendor products are bought from."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    contact = db.Column(db.String(100), default='')
    email = db.Column(db.String(100), default='')
    phone = db.Column(db.String(30), default='')
    address = db.Column(db.String(200), default='')
    cnpj = db.Column(db.String(18), default='')
    notes = db.Column(db.Text, default='')
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)


class Product(db.Model):
    """
    Ingredient or purchasable item.

    ``unit_price`` is the current price of ONE ``unit``. Changing either
    field changes the cost of every recipe using the product, so edits go
    through services.recalc in the same transaction.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, default='')
    internal_code = db.Column(db.String(50), default='')
    category_id = db.Column(db.Integer, db.ForeignKey('category.id', ondelete='SET NULL'), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey('supplier.id', ondelete='SET NULL'), nullable=True, index=True)

    # Unit the price is quoted in (canonical symbol from constants.UNITS)
    unit = db.Column(db.String(10), nullable=False, default='un')

    # Price per ONE unit
    unit_price = db.Column(db.Numeric(12, 4), nullable=False, default=0)

    # Weighted average of purchase prices
    average_cost = db.Column(db.Numeric(12, 4), nullable=True)

    # Stock on hand, in ``unit``; purchases add to it
    current_stock = db.Column(db.Numeric(12, 4), nullable=False, default=0)
    minimum_stock = db.Column(db.Numeric(12, 4), nullable=False, default=0)
    expiry_date = db.Column(db.Date, nullable=True)

    active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    category = db.relationship('Category')
    supplier = db.relationship('Supplier')

    @property
    def low_stock(self):
        """At or below the minimum, so an empty product with no minimum counts as low."""
        return (self.current_stock or 0) <= (self.minimum_stock or 0)

    def to_snapshot(self):
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            unit=self.unit,
            unit_price=self.unit_price,
            active=bool(self.active),
        )
