"""
Weekly Plan Models

Contains the WeeklyPlan and Meal models for weekly meal planning.
"""

from datetime import datetime

from .base import db


class WeeklyPlan(db.Model):
    """One household's meal plan for the 7 days starting on week_of."""
    __tablename__ = 'weekly_plan'
    __table_args__ = (
        db.UniqueConstraint('household_id', 'week_of', name='uq_weekly_plan_household_week'),
    )

    id = db.Column(db.Integer, primary_key=True)
    household_id = db.Column(db.Integer, db.ForeignKey('household.id'), nullable=False, index=True)
    week_of = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    meals = db.relationship('Meal', backref='weekly_plan', lazy=True,
                            cascade='all, delete-orphan', order_by='Meal.day')
    grocery_list = db.relationship('GroceryList', backref='weekly_plan', uselist=False,
                                   cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'week_of': self.week_of.isoformat(),
            'notes': self.notes,
            'created_by': self.created_by,
        }


class Meal(db.Model):
    """A planned meal slot. A day may hold any number of meals."""
    id = db.Column(db.Integer, primary_key=True)
    weekly_plan_id = db.Column(db.Integer, db.ForeignKey('weekly_plan.id', ondelete='CASCADE'), nullable=False, index=True)
    day = db.Column(db.Integer, nullable=False)  # 1-7, 1 = first day of the week
    meal_type = db.Column(db.String(20), default='dinner')
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='SET NULL'), nullable=True, index=True)
    custom_meal_name = db.Column(db.String(200), nullable=True)
    assigned_user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    calendar_event_id = db.Column(db.String(255), nullable=True)
    is_ai_suggested = db.Column(db.Boolean, default=False)
    notes = db.Column(db.Text, nullable=True)
    recipe = db.relationship('Recipe')

    def to_dict(self):
        return {
            'id': self.id,
            'day': self.day,
            'meal_type': self.meal_type,
            'recipe_id': self.recipe_id,
            'recipe_name': self.recipe.name if self.recipe else None,
            'custom_meal_name': self.custom_meal_name,
            'assigned_user_id': self.assigned_user_id,
            'calendar_event_id': self.calendar_event_id,
            'is_ai_suggested': bool(self.is_ai_suggested),
            'notes': self.notes,
        }
