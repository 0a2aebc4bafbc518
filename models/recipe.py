"""
Recipe Models

Contains the Recipe and RecipeIngredient models for managing
recipes and their ingredient associations.
"""

from datetime import datetime

from .base import db


class Recipe(db.Model):
    """Recipe with metadata and ingredient associations."""
    id = db.Column(db.Integer, primary_key=True)
    household_id = db.Column(db.Integer, db.ForeignKey('household.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(20), default='entree', index=True)
    cuisine = db.Column(db.String(50), nullable=True)
    source = db.Column(db.String(100), nullable=True)  # e.g. 'NYT Cooking'
    source_url = db.Column(db.String(500), default='')
    servings = db.Column(db.Integer, nullable=True)
    cost_rating = db.Column(db.Integer, nullable=True)  # 1-5
    time_rating = db.Column(db.Integer, nullable=True)  # 1-5
    instructions = db.Column(db.Text, default='')
    notes = db.Column(db.Text, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    ingredients = db.relationship('RecipeIngredient', backref='recipe', lazy=True,
                                  cascade='all, delete-orphan',
                                  order_by='RecipeIngredient.sort_order')

    def to_dict(self, include_ingredients=False):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'cuisine': self.cuisine,
            'source': self.source,
            'source_url': self.source_url,
            'servings': self.servings,
            'cost_rating': self.cost_rating,
            'time_rating': self.time_rating,
            'instructions': self.instructions,
            'notes': self.notes,
        }
        if include_ingredients:
            data['ingredients'] = [ri.to_dict() for ri in self.ingredients]
        return data


class RecipeIngredient(db.Model):
    """Join table linking recipes to ingredients with quantity and unit."""
    __table_args__ = (
        db.UniqueConstraint('recipe_id', 'ingredient_id', name='uq_recipe_ingredient'),
    )

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey('ingredient.id'), nullable=False, index=True)
    # Null quantity means "to taste" style usage
    quantity = db.Column(db.Float, nullable=True)
    unit = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.String(200), nullable=True)  # e.g. 'diced', 'room temperature'
    sort_order = db.Column(db.Integer, default=0)
    ingredient = db.relationship('Ingredient')

    def to_dict(self):
        return {
            'id': self.id,
            'ingredient_id': self.ingredient_id,
            'ingredient_name': self.ingredient.name if self.ingredient else None,
            'quantity': self.quantity,
            'unit': self.unit,
            'notes': self.notes,
            'sort_order': self.sort_order,
        }
