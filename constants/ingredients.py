"""
Ingredient Constants

Contains ingredient aliases and note keywords used when importing
ingredient lines from recipe pages.
"""

# Ingredient name aliases (normalized name -> canonical name)
INGREDIENT_ALIASES = {
    'sourdough': 'sourdough bread',
    'bread sourdough': 'sourdough bread',
    'bread white': 'white bread',
    'beef ground': 'ground beef',
    'minced beef': 'ground beef',
    'breast chicken': 'chicken breast',
    'chicken thighs': 'chicken thigh',
    'scallion': 'green onion',
    'spring onion': 'green onion',
    'garlic clove': 'garlic',
    'clove garlic': 'garlic',
    'extra virgin olive oil': 'olive oil',
    'canola oil': 'vegetable oil',
    'whipping cream': 'heavy cream',
    'heavy whipping cream': 'heavy cream',
    'parmesan cheese': 'parmesan',
    'parmigiano': 'parmesan',
    'parmigiano reggiano': 'parmesan',
    'mozzarella cheese': 'mozzarella',
    'kosher salt': 'salt',
    'sea salt': 'salt',
    'table salt': 'salt',
    'black pepper': 'pepper',
    'ground pepper': 'pepper',
    'ground black pepper': 'pepper',
    'yellow onion': 'onion',
    'white onion': 'onion',
    'all purpose flour': 'flour',
    'all-purpose flour': 'flour',
    'ap flour': 'flour',
    'granulated sugar': 'sugar',
    'white sugar': 'sugar',
    'light brown sugar': 'brown sugar',
    'dark brown sugar': 'brown sugar',
    'unsalted butter': 'butter',
    'salted butter': 'butter',
}

# Keywords indicating notes to remove from ingredient text (set for O(1) lookup)
NOTE_KEYWORDS = {
    'optional', 'divided', 'or more', 'or less', 'to taste',
    'for serving', 'for garnish', 'at room temp', 'softened',
    'melted', 'chopped', 'diced', 'minced', 'sliced', 'cubed',
    'sifted', 'packed', 'beaten', 'room temperature', 'thawed',
    'drained', 'rinsed', 'peeled', 'seeded', 'cored', 'trimmed',
    'cut into', 'plus more', 'as needed', 'torn', 'shredded'
}
