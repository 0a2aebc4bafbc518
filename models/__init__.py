"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .household import Household, User, Store
from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient
from .weekly_plan import WeeklyPlan, Meal
from .grocery import GroceryList, GroceryItem

__all__ = [
    'db',
    'Household',
    'User',
    'Store',
    'Ingredient',
    'Recipe',
    'RecipeIngredient',
    'WeeklyPlan',
    'Meal',
    'GroceryList',
    'GroceryItem',
]
