"""
Recipe Import Service

Reads schema.org Recipe data (JSON-LD) from a recipe web page and turns its
ingredient lines into (quantity, unit, name) rows.
"""

import json
import logging

from bs4 import BeautifulSoup

from utils.url_validator import safe_fetch
from utils.sanitizer import sanitize_ingredient_text, sanitize_recipe_name
from .matching import normalize_ingredient_name
from .parsing import parse_ingredient

logger = logging.getLogger(__name__)


def _is_recipe(item):
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    return item_type == 'Recipe' or (isinstance(item_type, list) and 'Recipe' in item_type)


def find_recipe_data(html):
    """Return the first JSON-LD Recipe object on the page, or None."""
    soup = BeautifulSoup(html, 'html.parser')

    for script in soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string)
        except (json.JSONDecodeError, TypeError):
            continue

        # Handle single recipe, array of items and @graph containers
        if isinstance(data, list):
            candidates = data
        elif isinstance(data, dict) and '@graph' in data:
            candidates = data['@graph']
        else:
            candidates = [data]

        for item in candidates:
            if _is_recipe(item):
                return item
    return None


def extract_ingredient_rows(recipe_data):
    """
    Parse the recipeIngredient lines of a JSON-LD recipe.

    Returns a list of dicts with 'name' (normalized), 'quantity', 'unit'
    and 'raw_text'. Lines that yield no ingredient name are skipped, and an
    ingredient appearing twice keeps its first line.
    """
    rows = []
    seen = set()
    for line in recipe_data.get('recipeIngredient') or []:
        if not isinstance(line, str):
            continue
        text = sanitize_ingredient_text(line)
        quantity, unit, raw_name = parse_ingredient(text)
        name = normalize_ingredient_name(raw_name)
        if not name or name in seen:
            continue
        seen.add(name)
        rows.append({
            'name': name,
            'quantity': quantity,
            'unit': unit,
            'raw_text': text,
        })
    return rows


def fetch_recipe_ingredients(url, timeout=10):
    """
    Fetch a recipe page and parse its ingredients.

    Returns (recipe_name, rows), or (None, []) when the page has no
    structured recipe data.

    Raises:
        SSRFError: if the URL is blocked
        requests.RequestException: for network errors
    """
    response = safe_fetch(url, timeout=timeout)
    recipe_data = find_recipe_data(response.text)
    if recipe_data is None:
        logger.warning(f"No JSON-LD recipe data found at {url}")
        return None, []

    name = sanitize_recipe_name(recipe_data.get('name'))
    return name, extract_ingredient_rows(recipe_data)
