"""
Constants Package

Lookup tables shared by the services and routes.
"""

from .units import UNIT_MAPPINGS, UNICODE_FRACTIONS
from .ingredients import INGREDIENT_ALIASES, NOTE_KEYWORDS
from .grocery import (
    DEFAULT_DEPARTMENT,
    MIXED_UNIT_POLICIES,
    STAPLE_LABEL,
    UNKNOWN_RECIPE_LABEL,
)
from .validation import (
    MAX_DAY,
    MAX_LENGTHS,
    MAX_RATING,
    MIN_DAY,
    MIN_RATING,
    VALID_MEAL_TYPES,
    VALID_RECIPE_CATEGORIES,
)
