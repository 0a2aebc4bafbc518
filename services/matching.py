"""
Ingredient Matching Service

Normalizes scraped ingredient names so that "2 Large Eggs" and "egg" land on
the same household ingredient.
"""

import re
from constants import INGREDIENT_ALIASES

# Descriptors that don't change what you buy (set for O(1) lookup)
REMOVE_WORDS = {'fresh', 'dried', 'chopped', 'diced', 'sliced', 'minced',
                'large', 'small', 'medium', 'whole', 'raw', 'cooked',
                'boneless', 'skinless', 'organic', 'frozen', 'canned',
                'a', 'an', 'the', 'of'}

SINGULAR_MAP = {
    'eggs': 'egg',
    'onions': 'onion',
    'tomatoes': 'tomato',
    'potatoes': 'potato',
    'carrots': 'carrot',
    'peppers': 'pepper',
    'cloves': 'clove',
    'breasts': 'breast',
    'thighs': 'thigh',
    'slices': 'slice',
    'stalks': 'stalk',
    'leaves': 'leaf',
    'berries': 'berry',
    'apples': 'apple',
    'lemons': 'lemon',
    'limes': 'lime',
    'oranges': 'orange',
    'bananas': 'banana',
    'mushrooms': 'mushroom',
    'tortillas': 'tortilla',
    'noodles': 'noodle',
}

# Words ending in 's' that are already singular
NO_STRIP_S = {'cheese', 'rice', 'grass', 'molasses', 'hummus', 'oats', 'asparagus', 'couscous'}


def normalize_ingredient_name(name):
    """Normalize an ingredient name for matching. Returns a lower-case name."""
    if not name:
        return ''

    # Lowercase and strip
    normalized = name.lower().strip()

    # Remove special characters (asterisks, etc.)
    normalized = re.sub(r'[*#@!]+', '', normalized)

    # Remove leading/trailing dashes, slashes, and punctuation
    normalized = normalized.strip('-/.,;: ')

    # Remove leading numbers and fractions that might be left over
    normalized = re.sub(r'^[\d\s/.-]+', '', normalized).strip()

    words = [w for w in normalized.split() if w not in REMOVE_WORDS]

    # Singularize common plurals, then a generic trailing 's'
    singularized = []
    for w in words:
        w = SINGULAR_MAP.get(w, w)
        if w.endswith('s') and not w.endswith('ss') and len(w) > 3 and w not in NO_STRIP_S:
            w = w[:-1]
        singularized.append(w)

    normalized = ' '.join(singularized)

    # Check exact aliases
    return INGREDIENT_ALIASES.get(normalized, normalized)
