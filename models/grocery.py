"""
Grocery Models

Contains the GroceryList and GroceryItem models. A weekly plan has at most
one grocery list, created the first time its groceries are generated.
"""

from datetime import datetime

from .base import db


class GroceryList(db.Model):
    """Shopping list for a weekly plan."""
    __tablename__ = 'grocery_list'

    id = db.Column(db.Integer, primary_key=True)
    weekly_plan_id = db.Column(db.Integer, db.ForeignKey('weekly_plan.id', ondelete='CASCADE'),
                               nullable=False, unique=True)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship('GroceryItem', backref='grocery_list', lazy=True,
                            cascade='all, delete-orphan')

    def to_dict(self, include_items=True, casefold=False):
        """Items are sorted by department then ingredient name, case-insensitively when casefold is set."""
        data = {
            'id': self.id,
            'weekly_plan_id': self.weekly_plan_id,
            'notes': self.notes,
            'created_by': self.created_by,
        }
        if include_items:
            if casefold:
                key = lambda x: (x['department'].casefold(), (x['ingredient_name'] or '').casefold())
            else:
                key = lambda x: (x['department'], x['ingredient_name'] or '')
            data['items'] = sorted((item.to_dict() for item in self.items), key=key)
        return data


class GroceryItem(db.Model):
    """One consolidated row on a grocery list. Store and department come from the ingredient."""
    __tablename__ = 'grocery_items'

    id = db.Column(db.Integer, primary_key=True)
    grocery_list_id = db.Column(db.Integer, db.ForeignKey('grocery_list.id', ondelete='CASCADE'),
                                nullable=False, index=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey('ingredient.id'), nullable=False, index=True)
    # Display string: "2.5", or "1 cup + 200 g" when units could not be summed
    quantity = db.Column(db.String(100), nullable=True)
    unit = db.Column(db.String(50), nullable=True)
    checked = db.Column(db.Boolean, default=False)
    is_staple = db.Column(db.Boolean, default=False)
    # Per-recipe contributions: [{recipe_id, recipe_name, quantity, unit}]
    recipe_breakdown = db.Column(db.JSON, nullable=True)
    added_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    ingredient = db.relationship('Ingredient')

    def to_dict(self):
        ing = self.ingredient
        return {
            'id': self.id,
            'ingredient_id': self.ingredient_id,
            'ingredient_name': ing.name if ing else None,
            'department': (ing.department if ing else None) or 'Other',
            'store_id': ing.store_id if ing else None,
            'quantity': self.quantity,
            'unit': self.unit or '',
            'checked': bool(self.checked),
            'is_staple': bool(self.is_staple),
            'recipe_breakdown': self.recipe_breakdown or [],
        }
