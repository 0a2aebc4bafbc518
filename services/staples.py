"""
Staple Merge Service

Staples are grocery items carried over from an earlier week, independent of
any recipe. They are folded into the recipe-derived list before saving.
"""

import copy

from constants import DEFAULT_DEPARTMENT, STAPLE_LABEL
from .quantities import display_with_unit, format_quantity, normalize_unit, parse_quantity


def _staple_quantity(staple):
    """Staple quantity as a display string. Missing quantities count as one."""
    raw = staple.get('quantity')
    if raw is None or str(raw).strip() == '':
        return '1'
    number = parse_quantity(raw)
    if number is None:
        return str(raw).strip()
    return format_quantity(number)


def _staple_entry(quantity, unit):
    return {
        'recipe_id': None,
        'recipe_name': STAPLE_LABEL,
        'quantity': quantity,
        'unit': unit,
    }


def _find_existing(items_by_id, items_by_name, staple):
    ingredient_id = staple.get('ingredient_id')
    if ingredient_id is not None:
        return items_by_id.get(ingredient_id)
    name = (staple.get('ingredient_name') or '').strip().lower()
    return items_by_name.get(name) if name else None


def merge_staples(items, staples):
    """
    Merge staple items into recipe-derived grocery items.

    A staple whose ingredient already has an item is merged into it: the
    item is marked as a staple, quantities are summed when the units match
    (both empty counts as matching) and otherwise joined into a display
    string with the unit cleared. A "Staple" entry is appended to the
    item's recipe breakdown. Staples with no matching item become new
    items. Staples without an ingredient id are matched by name.

    Args:
        items: grocery item drafts from build_grocery_items()
        staples: dicts with 'ingredient_id' (or None), 'ingredient_name',
                 'department', 'quantity', 'unit', 'store_id'

    Returns:
        New list of grocery item drafts; the inputs are not modified
    """
    merged = copy.deepcopy(list(items))
    items_by_id = {item['ingredient_id']: item for item in merged if item.get('ingredient_id') is not None}
    items_by_name = {item['ingredient_name'].strip().lower(): item for item in merged if item.get('ingredient_name')}

    for staple in staples:
        quantity = _staple_quantity(staple)
        unit = normalize_unit(staple.get('unit'))
        existing = _find_existing(items_by_id, items_by_name, staple)

        if existing is not None:
            existing['is_staple'] = True
            existing_unit = normalize_unit(existing.get('unit'))
            existing_qty = parse_quantity(existing.get('quantity'))
            staple_qty = parse_quantity(quantity)

            if existing_unit == unit and existing_qty is not None and staple_qty is not None:
                existing['quantity'] = format_quantity(existing_qty + staple_qty)
                existing['unit'] = existing_unit
            else:
                existing['quantity'] = ' + '.join([
                    display_with_unit(existing.get('quantity') or '1', existing_unit),
                    display_with_unit(quantity, unit),
                ])
                existing['unit'] = ''

            existing['recipe_breakdown'].append(_staple_entry(quantity, unit))
            continue

        ingredient_id = staple.get('ingredient_id')
        name = (staple.get('ingredient_name') or '').strip()
        item = {
            'id': f"staple-{ingredient_id}" if ingredient_id is not None else f"staple-{name.lower()}",
            'ingredient_id': ingredient_id,
            'ingredient_name': name,
            'department': staple.get('department') or DEFAULT_DEPARTMENT,
            'store_id': staple.get('store_id'),
            'quantity': quantity,
            'unit': unit,
            'recipe_breakdown': [_staple_entry(quantity, unit)],
            'is_staple': True,
            'is_manual_add': ingredient_id is None,
            'checked': False,
        }
        merged.append(item)
        if ingredient_id is not None:
            items_by_id[ingredient_id] = item
        if name:
            items_by_name[name.lower()] = item

    return merged
