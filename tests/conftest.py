"""
Shared fixtures: an in-memory database seeded with two households, and a
test client that can sign in as any seeded user.
"""

import os

# Must be set before the app module reads its config
os.environ['FLASK_ENV'] = 'testing'

from types import SimpleNamespace

import pytest

from app import app as flask_app
from models import db, Household, User, Ingredient, Recipe, RecipeIngredient


@pytest.fixture
def app():
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def seed(app):
    """
    Household 'Test Family' with:
      RecipeA: 1 cup sugar
      RecipeB: 2 eggs (no unit)
      Pancakes: 2 cups flour, 1 cup milk, salt (no quantity)
    and a second household with its own recipe.
    """
    home = Household(name='Test Family')
    other = Household(name='Neighbours')
    db.session.add_all([home, other])
    db.session.flush()

    cook = User(email='cook@example.com', name='Cook', household_id=home.id)
    outsider = User(email='other@example.com', name='Other', household_id=other.id)
    newcomer = User(email='new@example.com', name='New')

    sugar = Ingredient(household_id=home.id, name='sugar', department='Baking')
    eggs = Ingredient(household_id=home.id, name='eggs', department='Dairy')
    flour = Ingredient(household_id=home.id, name='flour', department='Baking')
    milk = Ingredient(household_id=home.id, name='milk', department='Dairy')
    salt = Ingredient(household_id=home.id, name='salt', department=None)
    other_rice = Ingredient(household_id=other.id, name='rice', department='Pantry')

    recipe_a = Recipe(household_id=home.id, name='RecipeA')
    recipe_b = Recipe(household_id=home.id, name='RecipeB')
    pancakes = Recipe(household_id=home.id, name='Pancakes', source_url='https://example.com/pancakes')
    other_recipe = Recipe(household_id=other.id, name='Rice Bowl')

    db.session.add_all([cook, outsider, newcomer, sugar, eggs, flour, milk, salt, other_rice,
                        recipe_a, recipe_b, pancakes, other_recipe])
    db.session.flush()

    db.session.add_all([
        RecipeIngredient(recipe_id=recipe_a.id, ingredient_id=sugar.id, quantity=1, unit='cup'),
        RecipeIngredient(recipe_id=recipe_b.id, ingredient_id=eggs.id, quantity=2, unit=None),
        RecipeIngredient(recipe_id=pancakes.id, ingredient_id=flour.id, quantity=2, unit='cups', sort_order=0),
        RecipeIngredient(recipe_id=pancakes.id, ingredient_id=milk.id, quantity=1, unit='cup', sort_order=1),
        RecipeIngredient(recipe_id=pancakes.id, ingredient_id=salt.id, quantity=None, unit=None, sort_order=2),
        RecipeIngredient(recipe_id=other_recipe.id, ingredient_id=other_rice.id, quantity=1, unit='cup'),
    ])
    db.session.commit()

    return SimpleNamespace(
        home=home, other=other,
        cook=cook, outsider=outsider, newcomer=newcomer,
        sugar=sugar, eggs=eggs, flour=flour, milk=milk, salt=salt, other_rice=other_rice,
        recipe_a=recipe_a, recipe_b=recipe_b, pancakes=pancakes, other_recipe=other_recipe,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Sign the test client in as a user email."""
    def _login(email):
        with client.session_transaction() as sess:
            sess['user_email'] = email
        return client
    return _login
