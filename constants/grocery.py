"""
Grocery Constants

Department names and labels used when building grocery lists.
"""

# Fallback department for ingredients without one
DEFAULT_DEPARTMENT = 'Other'

# Recipe name shown in a grocery item's breakdown for carried-over staples
STAPLE_LABEL = 'Staple'

# Shown when a recipe's name could not be resolved
UNKNOWN_RECIPE_LABEL = 'Unknown Recipe'

# Mixed-unit policies understood by the quantity aggregator
MIXED_UNIT_POLICIES = {'concat', 'first'}
