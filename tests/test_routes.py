"""
Tests for the JSON API through the Flask test client.
Recipe page fetches are mocked (no network).
"""

from datetime import date
from unittest.mock import MagicMock, patch

import requests
from sqlalchemy.exc import SQLAlchemyError

from models import db, GroceryItem, GroceryList, Ingredient, Meal, WeeklyPlan
from services import store


def create_plan(seed, week_of=date(2026, 10, 5), household=None, recipes=()):
    plan = WeeklyPlan(household_id=(household or seed.home).id, week_of=week_of)
    for day, recipe in recipes:
        plan.meals.append(Meal(day=day, recipe_id=recipe.id))
    db.session.add(plan)
    db.session.commit()
    return plan


# ============================================
# AUTH
# ============================================

def test_requires_session(client, seed):
    response = client.post('/weekly-plans/generate-grocery-list', json={'meals': []})
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Unauthorized'}


def test_user_without_household(login, seed):
    client = login('new@example.com')
    response = client.get('/weekly-plans')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Household not found'


def test_plan_from_other_household_is_forbidden(login, seed):
    plan = create_plan(seed, household=seed.other)
    client = login('cook@example.com')
    assert client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list').status_code == 403
    assert client.get(f'/weekly-plans/{plan.id}').status_code == 403


def test_missing_plan(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/9999/regenerate-grocery-list')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Weekly plan not found'


# ============================================
# PREVIEW
# ============================================

def test_preview_requires_meals(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/generate-grocery-list', json={'meals': []})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No meals provided'


def test_preview_aggregates_without_saving(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/generate-grocery-list', json={
        'meals': [
            {'day': 1, 'recipe_id': seed.recipe_a.id},
            {'day': 3, 'recipe_id': seed.recipe_a.id},
            {'day': 5, 'recipe_id': seed.recipe_b.id},
        ],
    })
    assert response.status_code == 200
    items = response.get_json()['grocery_items']
    assert [(i['ingredient_name'], i['quantity'], i['unit']) for i in items] == [
        ('sugar', '2', 'cup'),
        ('eggs', '2', ''),
    ]
    assert items[0]['recipe_breakdown'][0]['recipe_name'] == 'RecipeA (×2)'
    assert GroceryItem.query.count() == 0


def test_preview_merges_staples(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/generate-grocery-list', json={
        'meals': [{'day': 1, 'recipe_id': seed.pancakes.id}],
        'staples': [{'ingredient_id': seed.milk.id, 'ingredient_name': 'milk', 'quantity': '2', 'unit': 'liter'}],
    })
    items = {i['ingredient_name']: i for i in response.get_json()['grocery_items']}
    assert items['milk']['quantity'] == '1 cup + 2 liter'
    assert items['milk']['unit'] == ''
    assert items['milk']['is_staple'] is True
    assert (items['salt']['quantity'], items['salt']['department']) == ('1', 'Other')


def test_preview_ignores_other_households_recipes(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/generate-grocery-list', json={
        'meals': [{'day': 1, 'recipe_id': seed.other_recipe.id}],
    })
    assert response.status_code == 200
    assert response.get_json()['grocery_items'] == []


def test_preview_rejects_bad_recipe_id(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans/generate-grocery-list', json={'meals': [{'day': 1, 'recipe_id': 'abc'}]})
    assert response.status_code == 400


# ============================================
# WEEKLY PLANS AND REGENERATION
# ============================================

def test_create_plan_generates_grocery_list(login, seed):
    client = login('cook@example.com')
    response = client.post('/weekly-plans', json={
        'week_of': '2026-10-05',
        'meals': [
            {'day': 1, 'recipe_id': seed.recipe_a.id},
            {'day': 2, 'custom_meal_name': 'Leftovers'},
        ],
    })
    assert response.status_code == 201
    plan = response.get_json()['weekly_plan']
    assert plan['week_of'] == '2026-10-05'
    assert len(plan['meals']) == 2
    assert [(i['ingredient_name'], i['quantity'], i['unit']) for i in plan['grocery_list']['items']] == [
        ('sugar', '1', 'cup'),
    ]

    duplicate = client.post('/weekly-plans', json={
        'week_of': '2026-10-05',
        'meals': [{'day': 1, 'recipe_id': seed.recipe_b.id}],
    })
    assert duplicate.status_code == 400


def test_create_plan_validation(login, seed):
    client = login('cook@example.com')
    assert client.post('/weekly-plans', json={'meals': [{'day': 1, 'recipe_id': seed.recipe_a.id}]}).status_code == 400
    assert client.post('/weekly-plans', json={'week_of': 'next monday', 'meals': [{'day': 1}]}).status_code == 400
    assert client.post('/weekly-plans', json={'week_of': '2026-10-05', 'meals': []}).status_code == 400
    assert client.post('/weekly-plans', json={'week_of': '2026-10-05', 'meals': [{'day': 9, 'recipe_id': seed.recipe_a.id}]}).status_code == 400
    assert client.post('/weekly-plans', json={'week_of': '2026-10-05', 'meals': [{'day': 1, 'recipe_id': seed.other_recipe.id}]}).status_code == 404
    assert WeeklyPlan.query.count() == 0


def test_regenerate_replaces_items(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a), (3, seed.recipe_a), (5, seed.recipe_b)])
    client = login('cook@example.com')

    response = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list')
    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['item_count'] == 2

    checked = data['grocery_list']['items'][0]['id']
    client.patch(f'/grocery-items/{checked}', json={'checked': True})

    again = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list').get_json()
    assert again['item_count'] == 2
    assert not any(i['checked'] for i in again['grocery_list']['items'])
    strip = lambda items: [{k: v for k, v in i.items() if k != 'id'} for i in items]
    assert strip(again['grocery_list']['items']) == strip(data['grocery_list']['items'])


def test_regenerate_with_staples_body(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a)])
    client = login('cook@example.com')
    response = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list', json={
        'staples': [{'ingredient_id': seed.sugar.id, 'ingredient_name': 'sugar', 'quantity': '1', 'unit': 'cup'}],
    })
    items = response.get_json()['grocery_list']['items']
    assert [(i['quantity'], i['unit'], i['is_staple']) for i in items] == [('2', 'cup', True)]


def test_staples_cannot_use_other_households_ingredients(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a)])
    client = login('cook@example.com')

    response = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list', json={
        'staples': [
            {'ingredient_id': seed.other_rice.id, 'ingredient_name': 'rice', 'quantity': '1', 'unit': 'cup'},
            {'ingredient_id': seed.other_rice.id, 'quantity': '1'},
        ],
    })
    assert response.status_code == 200
    items = response.get_json()['grocery_list']['items']
    assert [(i['ingredient_name'], i['department']) for i in items] == [('sugar', 'Baking'), ('rice', 'Other')]
    assert seed.other_rice.id not in [i['ingredient_id'] for i in items]
    assert db.session.get(Ingredient, items[1]['ingredient_id']).household_id == seed.home.id

    preview = client.post('/weekly-plans/generate-grocery-list', json={
        'meals': [{'day': 1, 'recipe_id': seed.recipe_a.id}],
        'staples': [
            {'ingredient_id': seed.other_rice.id, 'ingredient_name': 'rice', 'quantity': '1', 'unit': 'cup'},
            {'ingredient_id': seed.other_rice.id, 'quantity': '1'},
        ],
    }).get_json()['grocery_items']
    assert [(i['ingredient_id'], i['ingredient_name'], i['department']) for i in preview] == [
        (seed.sugar.id, 'sugar', 'Baking'),
        (None, 'rice', 'Other'),
    ]


def test_saved_list_follows_sort_setting(app, login, seed, monkeypatch):
    zucchini = Ingredient(household_id=seed.home.id, name='Zucchini', department='Produce')
    apples = Ingredient(household_id=seed.home.id, name='apples', department='Produce')
    db.session.add_all([zucchini, apples])
    db.session.commit()
    plan = create_plan(seed)
    client = login('cook@example.com')
    body = {'staples': [
        {'ingredient_id': apples.id, 'quantity': '6'},
        {'ingredient_id': zucchini.id, 'quantity': '2'},
    ]}

    def names(items):
        return [i['ingredient_name'] for i in items]

    saved = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list', json=body).get_json()
    assert names(saved['grocery_list']['items']) == ['Zucchini', 'apples']

    monkeypatch.setitem(app.config, 'GROCERY_SORT_CASEFOLD', True)
    saved = client.post(f'/weekly-plans/{plan.id}/regenerate-grocery-list', json=body).get_json()
    assert names(saved['grocery_list']['items']) == ['apples', 'Zucchini']
    detail = client.get(f'/weekly-plans/{plan.id}').get_json()['weekly_plan']
    assert names(detail['grocery_list']['items']) == ['apples', 'Zucchini']
    preview = client.post('/weekly-plans/generate-grocery-list', json=dict(body, meals=[{'day': 1}]))
    assert names(preview.get_json()['grocery_items']) == ['apples', 'Zucchini']


def test_create_plan_is_not_saved_when_grocery_list_fails(login, seed, monkeypatch):
    client = login('cook@example.com')
    body = {'week_of': '2026-10-05', 'meals': [{'day': 1, 'recipe_id': seed.recipe_a.id}]}

    def broken_insert(grocery_list_id, rows, added_by=None):
        raise SQLAlchemyError('disk full')

    monkeypatch.setattr(store, 'insert_grocery_items', broken_insert)
    response = client.post('/weekly-plans', json=body)
    assert response.status_code == 500
    assert response.get_json()['error'] == 'Failed to save grocery list'
    assert WeeklyPlan.query.count() == 0
    assert GroceryList.query.count() == 0

    monkeypatch.undo()
    retry = client.post('/weekly-plans', json=body)
    assert retry.status_code == 201
    assert len(retry.get_json()['weekly_plan']['grocery_list']['items']) == 1


def test_get_update_delete_plan(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a)])
    client = login('cook@example.com')

    listed = client.get('/weekly-plans').get_json()['weekly_plans']
    assert [(p['id'], p['meal_count']) for p in listed] == [(plan.id, 1)]

    detail = client.get(f'/weekly-plans/{plan.id}').get_json()['weekly_plan']
    assert detail['grocery_list'] is None

    updated = client.put(f'/weekly-plans/{plan.id}', json={'notes': 'Busy week'})
    assert updated.get_json()['weekly_plan']['notes'] == 'Busy week'
    assert client.put(f'/weekly-plans/{plan.id}', json={}).status_code == 400

    assert client.delete(f'/weekly-plans/{plan.id}').status_code == 200
    assert client.get(f'/weekly-plans/{plan.id}').status_code == 404


def test_previous_staples_endpoint(login, seed):
    previous = create_plan(seed, week_of=date(2026, 9, 28), recipes=[(1, seed.recipe_a)])
    store.regenerate_grocery_list(previous, staples=[
        {'ingredient_id': seed.eggs.id, 'ingredient_name': 'eggs', 'quantity': '12', 'unit': ''},
    ])
    client = login('cook@example.com')

    data = client.get('/weekly-plans/previous-staples?week_of=2026-10-05').get_json()
    assert data['previous_week_of'] == '2026-09-28'
    assert [(s['ingredient_id'], s['quantity'], s['department']) for s in data['staples']] == [
        (seed.eggs.id, '12', 'Dairy'),
    ]

    none_before = client.get('/weekly-plans/previous-staples?week_of=2026-09-28').get_json()
    assert none_before == {'staples': [], 'previous_week_of': None}

    assert client.get('/weekly-plans/previous-staples').status_code == 400


# ============================================
# GROCERY ITEMS
# ============================================

def test_patch_grocery_item(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a)])
    store.regenerate_grocery_list(plan)
    item_id = GroceryItem.query.one().id
    client = login('cook@example.com')

    response = client.patch(f'/grocery-items/{item_id}', json={'checked': True})
    assert response.status_code == 200
    assert response.get_json()['grocery_item']['checked'] is True

    response = client.patch(f'/grocery-items/{item_id}', json={'color': 'blue'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No valid fields to update'

    outsider = login('other@example.com')
    assert outsider.patch(f'/grocery-items/{item_id}', json={'checked': False}).status_code == 403


def test_delete_grocery_item(login, seed):
    plan = create_plan(seed, recipes=[(1, seed.recipe_a)])
    store.regenerate_grocery_list(plan)
    item_id = GroceryItem.query.one().id
    client = login('cook@example.com')

    assert client.delete(f'/grocery-items/{item_id}').status_code == 200
    assert GroceryItem.query.count() == 0
    assert client.delete(f'/grocery-items/{item_id}').status_code == 404


# ============================================
# RECIPES AND INGREDIENTS
# ============================================

def test_recipes_are_household_scoped(login, seed):
    client = login('cook@example.com')
    names = [r['name'] for r in client.get('/recipes').get_json()['recipes']]
    assert names == ['Pancakes', 'RecipeA', 'RecipeB']
    assert client.get(f'/recipes/{seed.other_recipe.id}').status_code == 404

    detail = client.get(f'/recipes/{seed.pancakes.id}').get_json()['recipe']
    assert [i['ingredient_name'] for i in detail['ingredients']] == ['flour', 'milk', 'salt']


def test_create_recipe_with_ingredients(login, seed):
    client = login('cook@example.com')
    response = client.post('/recipes', json={
        'name': 'Omelette',
        'category': 'breakfast',
        'ingredients': [
            {'ingredient_id': seed.eggs.id, 'quantity': '3'},
            {'name': 'Chives', 'quantity': '1 1/2', 'unit': 'Tbsp'},
        ],
    })
    assert response.status_code == 201
    recipe = response.get_json()['recipe']
    assert [(i['ingredient_name'], i['quantity'], i['unit']) for i in recipe['ingredients']] == [
        ('eggs', 3.0, None),
        ('chives', 1.5, 'tbsp'),
    ]

    assert client.post('/recipes', json={'name': ''}).status_code == 400
    assert client.post('/recipes', json={'name': 'Cake', 'category': 'snackfood'}).status_code == 400


def test_replace_ingredients_endpoint(login, seed):
    client = login('cook@example.com')
    response = client.put(f'/recipes/{seed.recipe_a.id}/ingredients', json={
        'ingredients': [{'ingredient_id': seed.flour.id, 'quantity': 2, 'unit': 'cup'}],
    })
    assert response.status_code == 200
    assert [i['ingredient_name'] for i in response.get_json()['recipe']['ingredients']] == ['flour']

    foreign = client.put(f'/recipes/{seed.recipe_a.id}/ingredients', json={
        'ingredients': [{'ingredient_id': seed.other_rice.id, 'quantity': 1}],
    })
    assert foreign.status_code == 404

    bad_qty = client.put(f'/recipes/{seed.recipe_a.id}/ingredients', json={
        'ingredients': [{'name': 'salt', 'quantity': 'lots'}],
    })
    assert bad_qty.status_code == 400


def test_ingredients_search_and_create(login, seed):
    client = login('cook@example.com')
    found = client.get('/ingredients?search=UG').get_json()['ingredients']
    assert [i['name'] for i in found] == ['sugar']

    created = client.post('/ingredients', json={'name': 'Basil', 'department': 'Produce'}).get_json()['ingredient']
    assert created['name'] == 'basil'
    again = client.post('/ingredients', json={'name': 'BASIL'}).get_json()['ingredient']
    assert again['id'] == created['id']

    assert client.post('/ingredients', json={'name': ''}).status_code == 400


RECIPE_PAGE = """
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "WebPage", "name": "Pancakes"},
  {"@type": "Recipe", "name": "Fluffy Pancakes",
   "recipeIngredient": ["1 &frac12; cups all-purpose flour", "2 large eggs",
                        "1 cup milk", "Salt to taste"]}
]}
</script>
</head><body></body></html>
"""


def test_import_ingredients_from_source_page(login, seed):
    client = login('cook@example.com')
    fake_response = MagicMock(text=RECIPE_PAGE)

    with patch('services.importing.safe_fetch', return_value=fake_response) as mock_fetch:
        response = client.post(f'/recipes/{seed.pancakes.id}/import-ingredients')

    assert response.status_code == 200
    mock_fetch.assert_called_once_with('https://example.com/pancakes', timeout=10)
    data = response.get_json()
    assert data['ingredient_count'] == 4
    assert [(i['ingredient_name'], i['quantity'], i['unit']) for i in data['recipe']['ingredients']] == [
        ('flour', 1.5, 'cup'),
        ('egg', 2.0, None),
        ('milk', 1.0, 'cup'),
        ('salt to taste', None, None),
    ]


def test_import_without_source_url(login, seed):
    client = login('cook@example.com')
    response = client.post(f'/recipes/{seed.recipe_a.id}/import-ingredients')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Recipe has no source URL'


def test_import_fetch_failures(login, seed):
    client = login('cook@example.com')
    url = f'/recipes/{seed.pancakes.id}/import-ingredients'

    with patch('services.importing.safe_fetch', side_effect=requests.ConnectionError('down')):
        assert client.post(url).status_code == 502

    with patch('services.importing.safe_fetch', return_value=MagicMock(text='<html></html>')):
        response = client.post(url)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No ingredients found on the recipe page'

    # Existing ingredients survive failed imports
    detail = client.get(f'/recipes/{seed.pancakes.id}').get_json()['recipe']
    assert len(detail['ingredients']) == 3


def test_import_blocks_private_addresses(login, seed):
    client = login('cook@example.com')
    response = client.post(f'/recipes/{seed.pancakes.id}/import-ingredients', json={'url': 'http://127.0.0.1/admin'})
    assert response.status_code == 400
    assert 'blocked' in response.get_json()['error']
