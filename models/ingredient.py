"""
Ingredient Model

Household master list of ingredients. Names are deduplicated per household;
department drives grocery-aisle grouping.
"""

from datetime import datetime

from .base import db


class Ingredient(db.Model):
    """Ingredient with optional department and preferred store."""
    __table_args__ = (
        db.UniqueConstraint('household_id', 'name', name='uq_ingredient_household_name'),
    )

    id = db.Column(db.Integer, primary_key=True)
    household_id = db.Column(db.Integer, db.ForeignKey('household.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    # Store section, e.g. 'Produce', 'Meat & Seafood'
    department = db.Column(db.String(50), nullable=True, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey('store.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    store = db.relationship('Store')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'department': self.department,
            'store_id': self.store_id,
        }
