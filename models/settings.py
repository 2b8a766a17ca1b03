"""
Settings Model

Contains the Settings model for per-deployment overrides such as the CMV
classification thresholds.
"""

from .base import db


class Settings(db.Model):
    """Key-value storage for application settings."""
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(50), unique=True, nullable=False)
    value = db.Column(db.String(200))

    @classmethod
    def get_value(cls, key, default=None):
        row = cls.query.filter_by(key=key).first()
        return row.value if row is not None and row.value is not None else default

    @classmethod
    def set_value(cls, key, value):
        row = cls.query.filter_by(key=key).first()
        if row is None:
            row = cls(key=key)
            db.session.add(row)
        row.value = None if value is None else str(value)
        return row
