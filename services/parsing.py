"""
Parsing Service

Splits ingredient lines scraped from recipe pages ("1 ½ cups flour, sifted")
into quantity, unit and ingredient name.
"""

import re
from constants import UNIT_MAPPINGS, NOTE_KEYWORDS, UNICODE_FRACTIONS
from .quantities import parse_quantity

WHITESPACE = re.compile(r'[\s\u00a0\u2000-\u200b]+')
BRACKETED = (
    re.compile(r'\s*\([^)]*\)?'),
    re.compile(r'\s*\[[^\]]*\]?'),
    re.compile(r'\s*\{[^}]*\}?'),
)
# Mixed fraction, simple fraction, then plain or decimal number
LEADING_QUANTITY = re.compile(r'^(\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+\.?\d*)\s*')
TRAILING_NOTE = re.compile(r',\s*(.*)$')


def normalize_fractions(text):
    """Collapse whitespace and replace Unicode fractions with decimals ('1½' -> '1.5')."""
    text = WHITESPACE.sub(' ', text)

    for char, value in UNICODE_FRACTIONS.items():
        if char not in text:
            continue
        mixed = r'(\d+)\s*' + re.escape(char)
        if re.search(mixed, text):
            text = re.sub(mixed, lambda m, v=value: str(float(m.group(1)) + v), text)
        else:
            text = text.replace(char, str(value))
    return text


def _strip_brackets(text):
    # Nested brackets need more than one pass
    for _ in range(3):
        for pattern in BRACKETED:
            text = pattern.sub('', text)
    return re.sub(r'[(){}\[\]]+', '', text)


def _strip_note(text):
    """Drop ', minced' style notes but keep commas inside names ('boneless, skinless thighs')."""
    match = TRAILING_NOTE.search(text)
    if match and any(keyword in match.group(1).lower() for keyword in NOTE_KEYWORDS):
        return text[:match.start()]
    return text


def _split_quantity(text):
    match = LEADING_QUANTITY.match(text)
    if not match:
        return None, text
    rest = text[match.end():].strip()
    # Stray numbers before the first word ("2 1/2-3 cups")
    rest = re.sub(r'^[\d\s/]+(?=\s*[a-zA-Z])', '', rest).strip()
    return parse_quantity(match.group(1)), rest


def _split_unit(text):
    words = text.split()
    if len(words) > 1:
        unit = UNIT_MAPPINGS.get(words[0].lower().rstrip('.'))
        if unit:
            return unit, ' '.join(words[1:])
    return None, text


def parse_ingredient(text):
    """
    Parse ingredient text like '2 cups flour' into (quantity, unit, name).

    quantity is None when the line has no leading amount ("salt to taste")
    and unit is None when no known unit follows the amount. A unit is only
    recognised after a quantity, so "can opener" stays a name.
    """
    text = (text or '').strip()
    if not text:
        return None, None, None

    text = _strip_brackets(normalize_fractions(text))
    text = re.sub(r'^[/\-\s]+', '', text)
    text = _strip_note(text)

    quantity, text = _split_quantity(text)

    unit = None
    if quantity is not None:
        unit, text = _split_unit(text)

    name = re.sub(r'^of\s+', '', text.strip(), flags=re.IGNORECASE)
    return quantity, unit, name or None
