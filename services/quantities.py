"""
Quantity Aggregation Service

Normalizes units, formats quantities for display and consolidates the
quantities of one ingredient used by several recipes in a week.
"""

import re

from constants import MIXED_UNIT_POLICIES, UNICODE_FRACTIONS


def normalize_unit(unit):
    """Lower-case and trim a unit string. None becomes ''."""
    return (unit or '').strip().lower()


def format_quantity(value):
    """
    Format a number for display.

    Whole numbers render without a decimal point; anything else is rounded
    to 2 decimal places with trailing zeros stripped (2.50 -> '2.5').
    """
    text = f"{round(float(value), 2):.2f}".rstrip('0').rstrip('.')
    if text == '-0':
        return '0'
    return text


def parse_quantity(value):
    """
    Convert a quantity to a float, or None if it is not numeric.

    Accepts numbers, numeric strings, simple fractions ('1/2'), mixed
    fractions ('1 1/2') and unicode fractions ('1½').
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    s = str(value).strip()
    if not s:
        return None

    for char, frac in UNICODE_FRACTIONS.items():
        if char in s:
            s = re.sub(r'(\d+)\s*' + re.escape(char),
                       lambda m, f=frac: str(int(m.group(1)) + f), s)
            s = s.replace(char, str(frac))

    mixed_match = re.match(r'^(\d+)\s+(\d+)\s*/\s*(\d+)$', s)
    if mixed_match:
        whole, num, denom = (int(g) for g in mixed_match.groups())
        return whole + num / denom if denom else None

    frac_match = re.match(r'^(\d+)\s*/\s*(\d+)$', s)
    if frac_match:
        num, denom = (int(g) for g in frac_match.groups())
        return num / denom if denom else None

    try:
        return float(s)
    except ValueError:
        return None


def display_with_unit(quantity, unit):
    """Join a quantity and unit for display: ('2', 'cup') -> '2 cup', ('2', '') -> '2'."""
    return f"{quantity} {unit}" if unit else f"{quantity}"


def aggregate_quantities(items, mixed_unit_policy='concat'):
    """
    Consolidate one ingredient's quantities across the recipes of a week.

    Args:
        items: iterable of dicts with 'quantity' (number or None),
               'unit' (str or None) and 'occurrences' (int)
        mixed_unit_policy: what to do when more than one unit appears.
            'concat' joins every unit total into a display string
            ("1 cup + 200 g") and clears the unit. 'first' keeps only the
            total of the first unit seen and discards the rest.

    Returns:
        (quantity, unit) where quantity is a display string
    """
    if mixed_unit_policy not in MIXED_UNIT_POLICIES:
        raise ValueError(f"Unknown mixed unit policy: {mixed_unit_policy}")

    items = list(items)
    with_qty = [item for item in items if item.get('quantity') is not None]

    # Nothing measurable (e.g. "salt to taste"): one per planned use
    if not with_qty:
        total_occurrences = sum(item.get('occurrences', 1) for item in items)
        return format_quantity(total_occurrences), ''

    # dicts keep insertion order, so "first unit" is the first one seen
    by_unit = {}
    for item in with_qty:
        unit = normalize_unit(item.get('unit'))
        total_for_item = float(item['quantity']) * item.get('occurrences', 1)
        by_unit[unit] = by_unit.get(unit, 0.0) + total_for_item

    if len(by_unit) == 1 or mixed_unit_policy == 'first':
        unit, total = next(iter(by_unit.items()))
        return format_quantity(total), unit

    parts = [display_with_unit(format_quantity(total), unit) for unit, total in by_unit.items()]
    return ' + '.join(parts), ''
