from flask import Flask, request, jsonify, session, abort
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import date
import logging
import requests

from config import get_config
from constants import MAX_LENGTHS, MAX_DAY, MAX_RATING, MIN_DAY, MIN_RATING, VALID_MEAL_TYPES, VALID_RECIPE_CATEGORIES
from models import db, User, Ingredient, Recipe, WeeklyPlan, Meal, GroceryItem, GroceryList
from services import build_grocery_items, parse_quantity, HouseholdError, NotFoundError, ValidationError, PersistenceError
from services import store
from services.importing import fetch_recipe_ingredients
from utils.url_validator import SSRFError
from utils.sanitizer import clean_text, sanitize_url

app = Flask(__name__)
app.config.from_object(get_config())

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

db.init_app(app)
migrate = Migrate(app, db)


# ============================================
# ERROR HANDLERS
# ============================================

@app.errorhandler(HouseholdError)
def handle_household_error(e):
    return jsonify({'error': str(e)}), e.status_code


@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({'error': e.description}), e.code


# ============================================
# REQUEST HELPERS
# ============================================

def get_current_user():
    """Resolve the signed-in user. 401 without a session, 404 without a household."""
    email = session.get('user_email')
    if not email:
        abort(401, description='Unauthorized')

    user = User.query.filter_by(email=email).first()
    if user is None or user.household_id is None:
        abort(404, description='Household not found')
    return user


def get_household_plan(plan_id, user):
    plan = db.session.get(WeeklyPlan, plan_id)
    if plan is None:
        abort(404, description='Weekly plan not found')
    if plan.household_id != user.household_id:
        abort(403, description='Forbidden')
    return plan


def get_household_recipe(recipe_id, user):
    recipe = Recipe.query.filter_by(id=recipe_id, household_id=user.household_id).first()
    if recipe is None:
        raise NotFoundError('Recipe not found')
    return recipe


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def parse_week_of(value):
    if not value:
        raise ValidationError('week_of is required')
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid week_of date: {value}")


def parse_int(value, field, min_val=None, max_val=None, required=False):
    """Parse an optional integer field with optional bounds."""
    if value is None or value == '':
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        result = int(value)
    except (ValueError, TypeError):
        raise ValidationError(f"{field} must be an integer")
    if (min_val is not None and result < min_val) or (max_val is not None and result > max_val):
        raise ValidationError(f"{field} must be between {min_val} and {max_val}")
    return result


def parse_staples(value):
    """Validate carried-over staple items from a request body."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError('staples must be a list')

    staples = []
    for raw in value:
        if not isinstance(raw, dict):
            raise ValidationError('Each staple must be an object')
        ingredient_id = parse_int(raw.get('ingredient_id'), 'ingredient_id')
        name = clean_text(raw.get('ingredient_name'), max_length=MAX_LENGTHS['ingredient_name'])
        if ingredient_id is None and not name:
            raise ValidationError('Each staple needs an ingredient_id or ingredient_name')
        staples.append({
            'ingredient_id': ingredient_id,
            'ingredient_name': name,
            'department': clean_text(raw.get('department'), max_length=MAX_LENGTHS['department']) or None,
            'store_id': parse_int(raw.get('store_id'), 'store_id'),
            'quantity': raw.get('quantity'),
            'unit': clean_text(raw.get('unit'), max_length=MAX_LENGTHS['unit']),
        })
    return staples


def parse_ingredient_entries(value):
    """Validate recipe ingredient rows: ingredient_id or name, quantity, unit, notes."""
    if not isinstance(value, list):
        raise ValidationError('ingredients must be a list')

    entries = []
    for raw in value:
        if not isinstance(raw, dict):
            raise ValidationError('Each ingredient must be an object')
        ingredient_id = parse_int(raw.get('ingredient_id'), 'ingredient_id')
        name = clean_text(raw.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
        if ingredient_id is None and not name:
            raise ValidationError('Each ingredient needs an ingredient_id or name')

        quantity = None
        raw_qty = raw.get('quantity')
        if raw_qty is not None and str(raw_qty).strip() != '':
            quantity = parse_quantity(raw_qty)
            if quantity is None or quantity < 0:
                raise ValidationError(f"Invalid quantity: {raw_qty}")

        entries.append({
            'ingredient_id': ingredient_id,
            'name': name,
            'department': clean_text(raw.get('department'), max_length=MAX_LENGTHS['department']) or None,
            'quantity': quantity,
            'unit': clean_text(raw.get('unit'), max_length=20).lower(),
            'notes': clean_text(raw.get('notes'), max_length=MAX_LENGTHS['ingredient_notes']),
        })
    return entries


def grocery_options():
    return {
        'mixed_unit_policy': app.config['GROCERY_MIXED_UNIT_POLICY'],
        'casefold': app.config['GROCERY_SORT_CASEFOLD'],
    }


def plan_detail(plan):
    data = plan.to_dict()
    data['meals'] = [meal.to_dict() for meal in plan.meals]
    grocery_list = plan.grocery_list
    data['grocery_list'] = grocery_list.to_dict(casefold=app.config['GROCERY_SORT_CASEFOLD']) if grocery_list else None
    return data


def commit_or_fail(message):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"{message}: {e}")
        raise PersistenceError(message) from e


# ============================================
# ROUTES - WEEKLY PLANS
# ============================================

@app.route('/weekly-plans', methods=['GET'])
def list_weekly_plans():
    user = get_current_user()
    plans = WeeklyPlan.query.filter_by(household_id=user.household_id).order_by(WeeklyPlan.week_of.desc()).all()
    result = []
    for plan in plans:
        data = plan.to_dict()
        data['meal_count'] = len(plan.meals)
        result.append(data)
    return jsonify({'weekly_plans': result})


@app.route('/weekly-plans', methods=['POST'])
def create_weekly_plan():
    user = get_current_user()
    data = get_json_body()

    week_of = parse_week_of(data.get('week_of'))
    raw_meals = data.get('meals')
    if not isinstance(raw_meals, list) or not raw_meals:
        raise ValidationError('No meals provided')
    staples = parse_staples(data.get('staples'))

    if WeeklyPlan.query.filter_by(household_id=user.household_id, week_of=week_of).first():
        raise ValidationError(f"A weekly plan for {week_of.isoformat()} already exists")

    plan = WeeklyPlan(
        household_id=user.household_id,
        week_of=week_of,
        notes=clean_text(data.get('notes'), max_length=MAX_LENGTHS['notes'], multiline=True) or None,
        created_by=user.id,
    )

    for raw in raw_meals:
        if not isinstance(raw, dict):
            raise ValidationError('Each meal must be an object')
        recipe_id = parse_int(raw.get('recipe_id'), 'recipe_id')
        custom_name = clean_text(raw.get('custom_meal_name'), max_length=MAX_LENGTHS['meal_name']) or None
        if recipe_id is None and not custom_name:
            raise ValidationError('Each meal needs a recipe_id or custom_meal_name')
        if recipe_id is not None:
            get_household_recipe(recipe_id, user)

        meal_type = raw.get('meal_type') or 'dinner'
        if meal_type not in VALID_MEAL_TYPES:
            raise ValidationError(f"Invalid meal_type: {meal_type}")

        plan.meals.append(Meal(
            day=parse_int(raw.get('day'), 'day', MIN_DAY, MAX_DAY, required=True),
            meal_type=meal_type,
            recipe_id=recipe_id,
            custom_meal_name=custom_name,
            assigned_user_id=parse_int(raw.get('assigned_user_id'), 'assigned_user_id'),
            notes=clean_text(raw.get('notes'), max_length=MAX_LENGTHS['notes'], multiline=True) or None,
        ))

    # Flushed only; the grocery list save commits plan and items together
    db.session.add(plan)
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Duplicate weekly plan for household {user.household_id}, {week_of}: {e}")
        raise ValidationError(f"A weekly plan for {week_of.isoformat()} already exists")
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to create weekly plan: {e}")
        raise PersistenceError('Failed to create weekly plan') from e

    store.regenerate_grocery_list(plan, user=user, staples=staples, **grocery_options())
    logger.info(f"Created weekly plan {plan.id} ({week_of}) with {len(plan.meals)} meals")
    return jsonify({'weekly_plan': plan_detail(plan)}), 201


@app.route('/weekly-plans/<int:id>', methods=['GET'])
def get_weekly_plan(id):
    user = get_current_user()
    plan = get_household_plan(id, user)
    return jsonify({'weekly_plan': plan_detail(plan)})


@app.route('/weekly-plans/<int:id>', methods=['PUT'])
def update_weekly_plan(id):
    user = get_current_user()
    plan = get_household_plan(id, user)
    data = get_json_body()

    if 'notes' not in data:
        raise ValidationError('No valid fields to update')
    plan.notes = clean_text(data.get('notes'), max_length=MAX_LENGTHS['notes'], multiline=True) or None
    commit_or_fail('Failed to update weekly plan')
    return jsonify({'weekly_plan': plan.to_dict()})


@app.route('/weekly-plans/<int:id>', methods=['DELETE'])
def delete_weekly_plan(id):
    user = get_current_user()
    plan = get_household_plan(id, user)
    db.session.delete(plan)
    commit_or_fail('Failed to delete weekly plan')
    logger.info(f"Deleted weekly plan {id}")
    return jsonify({'success': True})


@app.route('/weekly-plans/<int:id>/regenerate-grocery-list', methods=['POST'])
def regenerate_grocery_list(id):
    """Rebuild the plan's grocery list from its saved meals, replacing every item."""
    user = get_current_user()
    plan = get_household_plan(id, user)
    staples = parse_staples(get_json_body().get('staples'))

    grocery_list, _ = store.regenerate_grocery_list(plan, user=user, staples=staples, **grocery_options())
    data = grocery_list.to_dict(casefold=app.config['GROCERY_SORT_CASEFOLD'])
    return jsonify({
        'success': True,
        'item_count': len(data['items']),
        'grocery_list': data,
    })


@app.route('/weekly-plans/generate-grocery-list', methods=['POST'])
def preview_grocery_list():
    """Build a grocery list for meals that have not been saved yet. Nothing is persisted."""
    user = get_current_user()
    data = get_json_body()

    raw_meals = data.get('meals')
    if not isinstance(raw_meals, list) or not raw_meals:
        raise ValidationError('No meals provided')
    staples = parse_staples(data.get('staples'))

    meals = []
    for raw in raw_meals:
        if not isinstance(raw, dict):
            raise ValidationError('Each meal must be an object')
        meals.append({
            'day': raw.get('day'),
            'recipe_id': parse_int(raw.get('recipe_id'), 'recipe_id'),
        })

    recipe_ids = {m['recipe_id'] for m in meals if m['recipe_id'] is not None}
    try:
        recipes = {}
        if recipe_ids:
            recipes = {r.id: r.name for r in Recipe.query.filter(
                Recipe.household_id == user.household_id,
                Recipe.id.in_(recipe_ids)
            ).all()}
        recipe_ingredients = store.get_recipe_ingredients(recipes.keys())
        staples = store.resolve_staples(user.household_id, staples)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load recipe ingredients for preview: {e}")
        raise PersistenceError('Failed to load recipe ingredients') from e

    # Recipes from other households contribute nothing
    for meal in meals:
        if meal['recipe_id'] not in recipes:
            meal['recipe_id'] = None
        else:
            meal['recipe_name'] = recipes[meal['recipe_id']]

    items = build_grocery_items(meals, recipe_ingredients, staples=staples, **grocery_options())
    return jsonify({'grocery_items': items})


@app.route('/weekly-plans/previous-staples', methods=['GET'])
def previous_staples():
    user = get_current_user()
    week_of = parse_week_of(request.args.get('week_of'))

    staples, previous_week_of = store.get_previous_staples(user.household_id, week_of)
    return jsonify({
        'staples': staples,
        'previous_week_of': previous_week_of.isoformat() if previous_week_of else None,
    })


# ============================================
# ROUTES - GROCERY ITEMS
# ============================================

def get_household_grocery_item(item_id, user):
    item = db.session.get(GroceryItem, item_id)
    if item is None:
        abort(404, description='Grocery item not found')
    grocery_list = db.session.get(GroceryList, item.grocery_list_id)
    plan = db.session.get(WeeklyPlan, grocery_list.weekly_plan_id)
    if plan.household_id != user.household_id:
        abort(403, description='Forbidden')
    return item


@app.route('/grocery-items/<int:id>', methods=['PATCH'])
def update_grocery_item(id):
    user = get_current_user()
    item = get_household_grocery_item(id, user)
    data = get_json_body()

    updated = False
    if isinstance(data.get('checked'), bool):
        item.checked = data['checked']
        updated = True
    if isinstance(data.get('is_staple'), bool):
        item.is_staple = data['is_staple']
        updated = True
    if 'quantity' in data and isinstance(data['quantity'], (str, int, float)) and not isinstance(data['quantity'], bool):
        item.quantity = clean_text(data['quantity'], max_length=MAX_LENGTHS['quantity']) or None
        updated = True
    if 'unit' in data and isinstance(data['unit'], str):
        item.unit = clean_text(data['unit'], max_length=MAX_LENGTHS['unit']).lower() or None
        updated = True

    if not updated:
        raise ValidationError('No valid fields to update')

    commit_or_fail('Failed to update grocery item')
    return jsonify({'grocery_item': item.to_dict()})


@app.route('/grocery-items/<int:id>', methods=['DELETE'])
def delete_grocery_item(id):
    user = get_current_user()
    item = get_household_grocery_item(id, user)
    db.session.delete(item)
    commit_or_fail('Failed to delete grocery item')
    return jsonify({'success': True})


# ============================================
# ROUTES - RECIPES
# ============================================

@app.route('/recipes', methods=['GET'])
def list_recipes():
    user = get_current_user()
    query = Recipe.query.filter_by(household_id=user.household_id)
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    recipes = query.order_by(Recipe.name).all()
    return jsonify({'recipes': [r.to_dict() for r in recipes]})


@app.route('/recipes', methods=['POST'])
def create_recipe():
    user = get_current_user()
    data = get_json_body()

    name = clean_text(data.get('name'), max_length=MAX_LENGTHS['recipe_name'])
    if not name:
        raise ValidationError('Recipe name is required')

    category = data.get('category') or 'entree'
    if category not in VALID_RECIPE_CATEGORIES:
        raise ValidationError(f"Invalid category: {category}")

    recipe = Recipe(
        household_id=user.household_id,
        name=name,
        description=clean_text(data.get('description'), max_length=MAX_LENGTHS['description'], multiline=True),
        category=category,
        cuisine=clean_text(data.get('cuisine'), max_length=MAX_LENGTHS['department']) or None,
        source=clean_text(data.get('source'), max_length=100) or None,
        source_url=sanitize_url(data.get('source_url')),
        servings=parse_int(data.get('servings'), 'servings', 1, 100),
        cost_rating=parse_int(data.get('cost_rating'), 'cost_rating', MIN_RATING, MAX_RATING),
        time_rating=parse_int(data.get('time_rating'), 'time_rating', MIN_RATING, MAX_RATING),
        instructions=clean_text(data.get('instructions'), max_length=MAX_LENGTHS['instructions'], multiline=True),
        notes=clean_text(data.get('notes'), max_length=MAX_LENGTHS['notes'], multiline=True),
    )
    entries = parse_ingredient_entries(data['ingredients']) if 'ingredients' in data else []

    db.session.add(recipe)
    commit_or_fail('Failed to create recipe')
    if entries:
        store.replace_recipe_ingredients(recipe, entries)

    logger.info(f"Created recipe {recipe.id}: {recipe.name}")
    return jsonify({'recipe': recipe.to_dict(include_ingredients=True)}), 201


@app.route('/recipes/<int:id>', methods=['GET'])
def get_recipe(id):
    user = get_current_user()
    recipe = get_household_recipe(id, user)
    return jsonify({'recipe': recipe.to_dict(include_ingredients=True)})


@app.route('/recipes/<int:id>/ingredients', methods=['PUT'])
def replace_recipe_ingredients(id):
    user = get_current_user()
    recipe = get_household_recipe(id, user)
    entries = parse_ingredient_entries(get_json_body().get('ingredients'))

    store.replace_recipe_ingredients(recipe, entries)
    return jsonify({'recipe': recipe.to_dict(include_ingredients=True)})


@app.route('/recipes/<int:id>/import-ingredients', methods=['POST'])
def import_recipe_ingredients(id):
    """Replace a recipe's ingredients with the ones listed on its source page."""
    user = get_current_user()
    recipe = get_household_recipe(id, user)

    url = sanitize_url(get_json_body().get('url')) or recipe.source_url
    if not url:
        raise ValidationError('Recipe has no source URL')

    try:
        _, rows = fetch_recipe_ingredients(url, timeout=app.config['RECIPE_IMPORT_TIMEOUT'])
    except SSRFError as e:
        raise ValidationError(f"URL blocked for security: {e}")
    except requests.RequestException as e:
        logger.warning(f"Could not fetch {url} for recipe {recipe.id}: {e}")
        return jsonify({'error': 'Could not fetch recipe page'}), 502

    if not rows:
        raise ValidationError('No ingredients found on the recipe page')

    if url != recipe.source_url:
        recipe.source_url = url

    store.replace_recipe_ingredients(recipe, rows)
    return jsonify({
        'success': True,
        'ingredient_count': len(recipe.ingredients),
        'recipe': recipe.to_dict(include_ingredients=True),
    })


# ============================================
# ROUTES - INGREDIENTS
# ============================================

@app.route('/ingredients', methods=['GET'])
def list_ingredients():
    user = get_current_user()
    query = Ingredient.query.filter_by(household_id=user.household_id)
    search = (request.args.get('search') or '').strip()
    if search:
        query = query.filter(Ingredient.name.ilike(f"%{search}%"))
    ingredients = query.order_by(Ingredient.name).all()
    return jsonify({'ingredients': [i.to_dict() for i in ingredients]})


@app.route('/ingredients', methods=['POST'])
def create_ingredient():
    user = get_current_user()
    data = get_json_body()
    name = clean_text(data.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
    department = clean_text(data.get('department'), max_length=MAX_LENGTHS['department']) or None

    try:
        ingredient = store.find_or_create_ingredient_by_name(user.household_id, name, department)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to create ingredient '{name}': {e}")
        raise PersistenceError('Failed to create ingredient') from e
    commit_or_fail('Failed to create ingredient')
    return jsonify({'ingredient': ingredient.to_dict()})


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db():
    with app.app_context():
        # Enable SQLite foreign key enforcement
        from sqlalchemy import event
        from sqlalchemy.engine import Engine
        import sqlite3

        @event.listens_for(Engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            if isinstance(dbapi_connection, sqlite3.Connection):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        db.create_all()


if __name__ == '__main__':
    init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
