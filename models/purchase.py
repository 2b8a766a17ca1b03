"""
Purchase Models

Contains the Purchase and PurchaseItem models for recording supplier
invoices.
"""

from .base import db
from .product import utcnow


class Purchase(db.Model):
    """Supplier invoice; total_value = items - discount + taxes."""
    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey('supplier.id', ondelete='SET NULL'), nullable=True, index=True)
    purchase_date = db.Column(db.Date, nullable=False, index=True)
    invoice_number = db.Column(db.String(50), default='')
    total_value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    taxes = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    notes = db.Column(db.Text, default='')
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    supplier = db.relationship('Supplier')
    items = db.relationship('PurchaseItem', backref='purchase', lazy=True, cascade='all, delete-orphan')


class PurchaseItem(db.Model):
    """One product line on a purchase, priced per the product's unit."""
    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey('purchase.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id', ondelete='RESTRICT'), nullable=False, index=True)
    quantity = db.Column(db.Numeric(12, 4), nullable=False)
    unit_price = db.Column(db.Numeric(12, 4), nullable=False)
    subtotal = db.Column(db.Numeric(12, 4), nullable=False)
    product = db.relationship('Product')
