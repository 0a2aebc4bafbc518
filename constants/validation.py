"""
Validation Constants

Contains whitelist values for validating user input to prevent
injection attacks and ensure data integrity.
"""

# Valid recipe categories
VALID_RECIPE_CATEGORIES = {
    'entree', 'side', 'dessert', 'appetizer', 'breakfast',
    'soup', 'salad', 'beverage'
}

# Valid meal types for meal planning
VALID_MEAL_TYPES = {'breakfast', 'lunch', 'dinner', 'snack'}

# Days of a weekly plan (1 = first day of the week)
MIN_DAY = 1
MAX_DAY = 7

# Rating scale for cost and time ratings
MIN_RATING = 1
MAX_RATING = 5

# Maximum field lengths for security
MAX_LENGTHS = {
    'ingredient_name': 200,
    'recipe_name': 200,
    'department': 50,
    'unit': 50,
    'quantity': 100,
    'instructions': 50000,
    'ingredient_notes': 200,
    'meal_name': 200,
    'description': 5000,
    'notes': 5000,
}
