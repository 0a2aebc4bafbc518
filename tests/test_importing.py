"""Tests for reading recipe ingredients from schema.org JSON-LD."""

from unittest.mock import MagicMock, patch

import pytest

from services.importing import extract_ingredient_rows, fetch_recipe_ingredients, find_recipe_data
from utils.url_validator import SSRFError, is_safe_url


def page(json_ld):
    return f'<html><head><script type="application/ld+json">{json_ld}</script></head></html>'


def test_find_recipe_in_list():
    html = page('[{"@type": "Organization"}, {"@type": ["Recipe", "Thing"], "name": "Soup"}]')
    assert find_recipe_data(html)['name'] == 'Soup'


def test_find_recipe_skips_broken_scripts():
    html = ('<script type="application/ld+json">{not json</script>'
            '<script type="application/ld+json">{"@type": "Recipe", "name": "Stew"}</script>')
    assert find_recipe_data(html)['name'] == 'Stew'


def test_no_recipe_data():
    assert find_recipe_data('<html><h1>Hello</h1></html>') is None


def test_extract_rows_normalizes_and_dedupes():
    rows = extract_ingredient_rows({'recipeIngredient': [
        '2 Large Eggs',
        '1 egg yolk',
        '3 eggs',
        '',
        None,
        '1 tbsp Kosher Salt',
    ]})
    assert [(r['name'], r['quantity'], r['unit']) for r in rows] == [
        ('egg', 2.0, None),
        ('egg yolk', 1.0, None),
        ('salt', 1.0, 'tbsp'),
    ]


def test_fetch_recipe_ingredients():
    html = page('{"@type": "Recipe", "name": "Mac &amp; Cheese", "recipeIngredient": ["8 oz macaroni"]}')
    with patch('services.importing.safe_fetch', return_value=MagicMock(text=html)) as mock_fetch:
        name, rows = fetch_recipe_ingredients('https://example.com/mac', timeout=3)

    mock_fetch.assert_called_once_with('https://example.com/mac', timeout=3)
    assert name == 'Mac & Cheese'
    assert [(r['name'], r['quantity'], r['unit']) for r in rows] == [('macaroni', 8.0, 'oz')]


def test_unsafe_urls_rejected():
    assert is_safe_url('ftp://example.com/recipe')[0] is False
    assert is_safe_url('http://localhost/recipe')[0] is False
    assert is_safe_url('http://10.0.0.8/recipe')[0] is False
    assert is_safe_url('')[0] is False


def test_fetch_blocked_url_raises():
    with pytest.raises(SSRFError):
        fetch_recipe_ingredients('http://192.168.1.1/recipe')
