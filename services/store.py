"""
Grocery Store Service

Database reads and writes behind grocery list generation. Reads are issued
as separate fetch-then-join queries; saving a list deletes and reinserts
its items in one transaction, serialized per weekly plan.
"""

import logging
import threading
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from constants import DEFAULT_DEPARTMENT, STAPLE_LABEL
from models import db, GroceryItem, GroceryList, Ingredient, Meal, Recipe, RecipeIngredient, WeeklyPlan
from .errors import HouseholdError, NotFoundError, PersistenceError, ValidationError
from .grocery import build_grocery_items

logger = logging.getLogger(__name__)

# weekly plan id -> [lock, holders]; an entry lives only while someone holds or waits on it
_plan_locks = {}
_locks_guard = threading.Lock()


@contextmanager
def _plan_lock(weekly_plan_id):
    with _locks_guard:
        entry = _plan_locks.setdefault(weekly_plan_id, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _plan_locks[weekly_plan_id]


# =============================================================================
# Reads
# =============================================================================

def get_meals(weekly_plan_id):
    """Meals of a weekly plan as dicts with 'id', 'day', 'recipe_id' and 'recipe_name'."""
    meals = Meal.query.filter_by(weekly_plan_id=weekly_plan_id).order_by(Meal.day, Meal.id).all()

    recipe_ids = {m.recipe_id for m in meals if m.recipe_id is not None}
    names = {}
    if recipe_ids:
        names = {r.id: r.name for r in Recipe.query.filter(Recipe.id.in_(recipe_ids)).all()}

    return [{
        'id': m.id,
        'day': m.day,
        'recipe_id': m.recipe_id,
        'recipe_name': names.get(m.recipe_id),
    } for m in meals]


def get_recipe_ingredients(recipe_ids):
    """
    Ingredient rows for a set of recipes, joined with ingredient metadata.

    Returns dicts with 'recipe_id', 'ingredient_id', 'quantity', 'unit',
    'ingredient_name', 'department' and 'store_id'.
    """
    recipe_ids = set(recipe_ids)
    if not recipe_ids:
        return []

    rows = RecipeIngredient.query.filter(RecipeIngredient.recipe_id.in_(recipe_ids)).order_by(
        RecipeIngredient.recipe_id, RecipeIngredient.sort_order, RecipeIngredient.id).all()

    ingredient_ids = {row.ingredient_id for row in rows}
    ingredients = {}
    if ingredient_ids:
        ingredients = {i.id: i for i in Ingredient.query.filter(Ingredient.id.in_(ingredient_ids)).all()}

    result = []
    for row in rows:
        ingredient = ingredients.get(row.ingredient_id)
        result.append({
            'recipe_id': row.recipe_id,
            'ingredient_id': row.ingredient_id,
            'quantity': row.quantity,
            'unit': row.unit,
            'ingredient_name': ingredient.name if ingredient else '',
            'department': (ingredient.department if ingredient else None) or DEFAULT_DEPARTMENT,
            'store_id': ingredient.store_id if ingredient else None,
        })
    return result


def get_previous_staples(household_id, week_of):
    """
    Staple items from the latest plan before week_of.

    Returns (staples, previous_week_of). previous_week_of is None when the
    household has no earlier plan; staples is empty when that plan has no
    grocery list or no staple items.
    """
    previous = WeeklyPlan.query.filter(
        WeeklyPlan.household_id == household_id,
        WeeklyPlan.week_of < week_of
    ).order_by(WeeklyPlan.week_of.desc()).first()

    if previous is None:
        return [], None

    grocery_list = GroceryList.query.filter_by(weekly_plan_id=previous.id).first()
    if grocery_list is None:
        return [], previous.week_of

    items = GroceryItem.query.filter_by(grocery_list_id=grocery_list.id, is_staple=True).all()
    ingredient_ids = {item.ingredient_id for item in items}
    ingredients = {}
    if ingredient_ids:
        ingredients = {i.id: i for i in Ingredient.query.filter(Ingredient.id.in_(ingredient_ids)).all()}

    staples = []
    for item in items:
        ingredient = ingredients.get(item.ingredient_id)
        quantity, unit = item.quantity, item.unit

        # A staple merged into a recipe item carries its own share in the breakdown
        for entry in item.recipe_breakdown or []:
            if entry.get('recipe_id') is None and entry.get('recipe_name') == STAPLE_LABEL:
                quantity, unit = entry.get('quantity'), entry.get('unit')
                break

        staples.append({
            'ingredient_id': item.ingredient_id,
            'ingredient_name': ingredient.name if ingredient else 'Unknown',
            'department': (ingredient.department if ingredient else None) or DEFAULT_DEPARTMENT,
            'store_id': ingredient.store_id if ingredient else None,
            'store_name': ingredient.store.name if ingredient and ingredient.store else None,
            'quantity': str(quantity) if quantity else '1',
            'unit': unit or '',
        })
    return staples, previous.week_of


def household_ingredient_ids(household_id, ingredient_ids):
    """The subset of ingredient_ids that belong to the household."""
    ingredient_ids = set(ingredient_ids)
    if not ingredient_ids:
        return set()
    rows = db.session.query(Ingredient.id).filter(
        Ingredient.id.in_(ingredient_ids),
        Ingredient.household_id == household_id
    ).all()
    return {row.id for row in rows}


def resolve_staples(household_id, staples):
    """
    Check request staples against the household's ingredients.

    A staple whose ingredient id is one of the household's takes its name,
    department and store from that ingredient. Any other id is discarded:
    the staple falls back to its name (found or created when the list is
    saved), or is dropped when it has none.
    """
    staples = list(staples or [])
    ids = {s['ingredient_id'] for s in staples if s.get('ingredient_id') is not None}
    ingredients = {}
    if ids:
        ingredients = {i.id: i for i in Ingredient.query.filter(
            Ingredient.id.in_(ids),
            Ingredient.household_id == household_id
        ).all()}

    resolved = []
    for staple in staples:
        ingredient_id = staple.get('ingredient_id')
        name = (staple.get('ingredient_name') or '').strip()

        if ingredient_id is None:
            resolved.append(staple)
        elif ingredient_id in ingredients:
            ingredient = ingredients[ingredient_id]
            resolved.append(dict(
                staple,
                ingredient_name=ingredient.name,
                department=ingredient.department or DEFAULT_DEPARTMENT,
                store_id=ingredient.store_id,
            ))
        elif name:
            logger.warning(f"Staple '{name}' has unknown ingredient {ingredient_id} "
                           f"for household {household_id}; matching by name")
            resolved.append(dict(staple, ingredient_id=None, store_id=None))
        else:
            logger.warning(f"Dropping staple with unknown ingredient {ingredient_id} "
                           f"for household {household_id}")
    return resolved


# =============================================================================
# Writes
# =============================================================================

def find_or_create_grocery_list(weekly_plan_id, created_by=None):
    """Return the plan's grocery list, creating it on first generation."""
    grocery_list = GroceryList.query.filter_by(weekly_plan_id=weekly_plan_id).first()
    if grocery_list is None:
        grocery_list = GroceryList(weekly_plan_id=weekly_plan_id, created_by=created_by)
        db.session.add(grocery_list)
        db.session.flush()
        logger.info(f"Created grocery list {grocery_list.id} for weekly plan {weekly_plan_id}")
    return grocery_list


def find_or_create_ingredient_by_name(household_id, name, department=None):
    """
    Look up a household ingredient by name, case-insensitively.

    A missing ingredient is inserted with a lower-cased name inside a
    savepoint, so a failed insert does not roll back the caller's work.
    """
    clean_name = (name or '').strip()
    if not clean_name:
        raise ValidationError('Ingredient name is required')

    ingredient = Ingredient.query.filter(
        Ingredient.household_id == household_id,
        db.func.lower(Ingredient.name) == clean_name.lower()
    ).first()
    if ingredient is not None:
        return ingredient

    ingredient = Ingredient(household_id=household_id, name=clean_name.lower(), department=department)
    with db.session.begin_nested():
        db.session.add(ingredient)
    logger.info(f"Created ingredient '{ingredient.name}' for household {household_id}")
    return ingredient


def delete_grocery_items(grocery_list_id):
    """Delete every item on a grocery list. Returns the number of rows removed."""
    return GroceryItem.query.filter_by(grocery_list_id=grocery_list_id).delete(synchronize_session='fetch')


def insert_grocery_items(grocery_list_id, rows, added_by=None):
    """Insert grocery item rows (dicts with 'ingredient_id', 'quantity', 'unit', 'is_staple', 'recipe_breakdown')."""
    items = [GroceryItem(
        grocery_list_id=grocery_list_id,
        ingredient_id=row['ingredient_id'],
        quantity=row.get('quantity'),
        unit=row.get('unit') or None,
        checked=False,
        is_staple=bool(row.get('is_staple')),
        recipe_breakdown=row.get('recipe_breakdown') or [],
        added_by=added_by,
    ) for row in rows]
    db.session.add_all(items)
    return items


def save_grocery_list(plan, items, user=None):
    """
    Replace the grocery items of a weekly plan with freshly built drafts.

    Existing items are deleted and the drafts inserted in one transaction.
    Drafts without an ingredient id (manual staples), or whose id is not
    one of the household's ingredients, have their ingredient found or
    created by name; a draft whose ingredient cannot be resolved is dropped
    with a warning and the rest are still saved.

    Returns:
        The plan's GroceryList

    Raises:
        PersistenceError: if the transaction fails; nothing is changed
    """
    user_id = user.id if user is not None else None

    with _plan_lock(plan.id):
        try:
            # Row lock on backends that support it; sqlite serializes writers anyway
            WeeklyPlan.query.filter_by(id=plan.id).with_for_update().one()

            known_ids = household_ingredient_ids(
                plan.household_id, (item['ingredient_id'] for item in items if item.get('ingredient_id') is not None))

            grocery_list = find_or_create_grocery_list(plan.id, created_by=user_id)
            removed = delete_grocery_items(grocery_list.id)

            rows = []
            for item in items:
                ingredient_id = item.get('ingredient_id')
                if ingredient_id is not None and ingredient_id not in known_ids:
                    logger.warning(f"Ingredient {ingredient_id} is not in household {plan.household_id}; "
                                   f"resolving '{item.get('ingredient_name')}' by name")
                    ingredient_id = None
                if ingredient_id is None:
                    try:
                        ingredient = find_or_create_ingredient_by_name(
                            plan.household_id, item.get('ingredient_name'), item.get('department'))
                    except (SQLAlchemyError, HouseholdError) as e:
                        logger.warning(f"Dropping grocery item '{item.get('ingredient_name')}' "
                                       f"for weekly plan {plan.id}: {e}")
                        continue
                    ingredient_id = ingredient.id

                rows.append({
                    'ingredient_id': ingredient_id,
                    'quantity': item.get('quantity'),
                    'unit': item.get('unit'),
                    'is_staple': item.get('is_staple'),
                    'recipe_breakdown': item.get('recipe_breakdown'),
                })

            insert_grocery_items(grocery_list.id, rows, added_by=user_id)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save grocery list for weekly plan {plan.id}: {e}")
            raise PersistenceError('Failed to save grocery list') from e

    logger.info(f"Saved {len(rows)} grocery items for weekly plan {plan.id} (replaced {removed})")
    return grocery_list


def regenerate_grocery_list(plan, user=None, staples=None, mixed_unit_policy='concat', casefold=False):
    """
    Rebuild and persist a weekly plan's grocery list from its meals.

    All reads finish before anything is deleted, so a failed read leaves the
    previous items untouched. Regenerating is destructive: checked state and
    manual edits are reset.

    Returns:
        (grocery_list, items) where items are the saved drafts
    """
    try:
        meals = get_meals(plan.id)
        recipe_ids = {m['recipe_id'] for m in meals if m['recipe_id'] is not None}
        recipe_ingredients = get_recipe_ingredients(recipe_ids)
        staples = resolve_staples(plan.household_id, staples)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to load meals for weekly plan {plan.id}: {e}")
        raise PersistenceError('Failed to load recipe ingredients') from e

    items = build_grocery_items(meals, recipe_ingredients, staples=staples,
                                mixed_unit_policy=mixed_unit_policy, casefold=casefold)
    grocery_list = save_grocery_list(plan, items, user=user)
    return grocery_list, items


def replace_recipe_ingredients(recipe, entries):
    """
    Replace a recipe's ingredient rows.

    Args:
        recipe: Recipe to update
        entries: dicts with either 'ingredient_id' (must belong to the
            recipe's household) or 'name' (found or created), plus
            'quantity' (float or None), 'unit', 'notes' and optionally
            'department' for newly created ingredients

    The first entry for an ingredient wins; later duplicates are skipped.

    Raises:
        NotFoundError: for an ingredient id outside the household
        PersistenceError: if the write fails; the old rows are kept
    """
    try:
        RecipeIngredient.query.filter_by(recipe_id=recipe.id).delete(synchronize_session='fetch')

        seen = set()
        rows = []
        for position, entry in enumerate(entries):
            ingredient_id = entry.get('ingredient_id')
            if ingredient_id is not None:
                ingredient = Ingredient.query.filter_by(id=ingredient_id, household_id=recipe.household_id).first()
                if ingredient is None:
                    raise NotFoundError(f"Ingredient {ingredient_id} not found")
            else:
                ingredient = find_or_create_ingredient_by_name(
                    recipe.household_id, entry.get('name'), entry.get('department'))

            if ingredient.id in seen:
                continue
            seen.add(ingredient.id)
            rows.append(RecipeIngredient(
                recipe_id=recipe.id,
                ingredient_id=ingredient.id,
                quantity=entry.get('quantity'),
                unit=entry.get('unit') or None,
                notes=entry.get('notes') or None,
                sort_order=position,
            ))

        db.session.add_all(rows)
        db.session.commit()
    except HouseholdError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to save ingredients for recipe {recipe.id}: {e}")
        raise PersistenceError('Failed to save recipe ingredients') from e

    logger.info(f"Recipe {recipe.id} now has {len(rows)} ingredients")
    return rows
