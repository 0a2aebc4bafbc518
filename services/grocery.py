"""
Grocery List Service

Turns a week's meals into grocery items: counts how often each recipe is
planned, groups recipe ingredients by ingredient, consolidates quantities
and merges carried-over staples.

All functions here work on plain dicts so the preview endpoint (meals sent
by the client) and regeneration (meals read from the database) share one
code path.
"""

from constants import DEFAULT_DEPARTMENT, UNKNOWN_RECIPE_LABEL
from .quantities import aggregate_quantities, format_quantity, normalize_unit
from .staples import merge_staples


def count_recipe_occurrences(meals):
    """
    Count meal slots per recipe.

    Args:
        meals: iterable of dicts with 'recipe_id' and optionally 'recipe_name'

    Returns:
        {recipe_id: {'count': int, 'name': str}}. Meals without a recipe
        (custom meals) are left out. Two slots on the same day count twice.
    """
    occurrences = {}
    for meal in meals:
        recipe_id = meal.get('recipe_id')
        if recipe_id is None:
            continue
        entry = occurrences.get(recipe_id)
        if entry is None:
            entry = occurrences[recipe_id] = {'count': 0, 'name': ''}
        entry['count'] += 1
        if not entry['name'] and meal.get('recipe_name'):
            entry['name'] = meal['recipe_name']
    return occurrences


def group_recipe_ingredients(recipe_ingredients, occurrences):
    """
    Bucket recipe ingredient rows by ingredient id.

    Each bucket entry carries its recipe's occurrence count so quantities
    can be scaled when a recipe is planned more than once. Rows for recipes
    that are not planned this week are skipped.
    """
    groups = {}
    for row in recipe_ingredients:
        occurrence = occurrences.get(row['recipe_id'])
        if occurrence is None or row.get('ingredient_id') is None:
            continue

        ingredient_id = row['ingredient_id']
        group = groups.get(ingredient_id)
        if group is None:
            group = groups[ingredient_id] = {
                'ingredient_id': ingredient_id,
                'ingredient_name': row.get('ingredient_name') or '',
                'department': row.get('department') or DEFAULT_DEPARTMENT,
                'store_id': row.get('store_id'),
                'items': [],
            }

        group['items'].append({
            'recipe_id': row['recipe_id'],
            'recipe_name': occurrence['name'] or UNKNOWN_RECIPE_LABEL,
            'quantity': row.get('quantity'),
            'unit': row.get('unit'),
            'occurrences': occurrence['count'],
        })
    return groups


def build_recipe_breakdown(entries):
    """Per-recipe contributions for one grocery item, scaled by occurrences."""
    breakdown = []
    for entry in entries:
        count = entry['occurrences']
        name = entry['recipe_name']
        if count > 1:
            name = f"{name} (×{count})"

        if entry['quantity'] is not None:
            quantity = format_quantity(float(entry['quantity']) * count)
        else:
            quantity = format_quantity(count)

        breakdown.append({
            'recipe_id': entry['recipe_id'],
            'recipe_name': name,
            'quantity': quantity,
            'unit': normalize_unit(entry['unit']),
        })
    return breakdown


def sort_grocery_items(items, casefold=False):
    """Sort by department, then ingredient name. Case-sensitive unless casefold is set."""
    if casefold:
        return sorted(items, key=lambda x: (x['department'].casefold(), x['ingredient_name'].casefold()))
    return sorted(items, key=lambda x: (x['department'], x['ingredient_name']))


def build_grocery_items(meals, recipe_ingredients, staples=None,
                        mixed_unit_policy='concat', casefold=False):
    """
    Build the grocery list for a week.

    Args:
        meals: dicts with 'recipe_id' (or None) and 'recipe_name'
        recipe_ingredients: dicts with 'recipe_id', 'ingredient_id',
            'quantity', 'unit', 'ingredient_name', 'department', 'store_id'
        staples: optional carried-over items, see merge_staples()
        mixed_unit_policy: passed to aggregate_quantities()
        casefold: case-insensitive sort

    Returns:
        Sorted list of grocery item drafts
    """
    occurrences = count_recipe_occurrences(meals)
    groups = group_recipe_ingredients(recipe_ingredients, occurrences)

    items = []
    for group in groups.values():
        quantity, unit = aggregate_quantities(group['items'], mixed_unit_policy)
        items.append({
            'id': f"ing-{group['ingredient_id']}",
            'ingredient_id': group['ingredient_id'],
            'ingredient_name': group['ingredient_name'],
            'department': group['department'],
            'store_id': group['store_id'],
            'quantity': quantity,
            'unit': unit,
            'recipe_breakdown': build_recipe_breakdown(group['items']),
            'is_staple': False,
            'is_manual_add': False,
            'checked': False,
        })

    if staples:
        items = merge_staples(items, staples)

    return sort_grocery_items(items, casefold=casefold)
