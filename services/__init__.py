"""
Services Package

Business logic modules for the household application.
"""

from .errors import (
    HouseholdError,
    NotFoundError,
    ValidationError,
    PersistenceError,
)

from .quantities import (
    normalize_unit,
    format_quantity,
    parse_quantity,
    aggregate_quantities,
)

from .grocery import (
    count_recipe_occurrences,
    group_recipe_ingredients,
    build_recipe_breakdown,
    build_grocery_items,
    sort_grocery_items,
)

from .staples import merge_staples

from .parsing import (
    normalize_fractions,
    parse_ingredient,
)

from .matching import normalize_ingredient_name

__all__ = [
    # Errors
    'HouseholdError',
    'NotFoundError',
    'ValidationError',
    'PersistenceError',
    # Quantities
    'normalize_unit',
    'format_quantity',
    'parse_quantity',
    'aggregate_quantities',
    # Grocery
    'count_recipe_occurrences',
    'group_recipe_ingredients',
    'build_recipe_breakdown',
    'build_grocery_items',
    'sort_grocery_items',
    # Staples
    'merge_staples',
    # Parsing
    'normalize_fractions',
    'parse_ingredient',
    'normalize_ingredient_name',
]
