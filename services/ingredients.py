"""
Ingredient Lines

Shared handling for the three ingredient tables (canonical recipes, pending
imports, user submissions). All three store name / quantity / unit text
plus a position that is the index in the list the caller supplied.
"""

from models import IngredientInput, IngredientView
from constants import MAX_LENGTHS

from .errors import ValidationError

# Owner kind -> (table, owner column). Table names never come from callers.
INGREDIENT_TABLES = {
    'recipe': ('ingredients', 'recipe_id'),
    'pending': ('pending_ingredients', 'pending_recipe_id'),
    'submission': ('user_submitted_ingredients', 'submitted_recipe_id'),
}


def _table(kind):
    try:
        return INGREDIENT_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown ingredient owner kind: {kind}")


def coerce_ingredients(value, field_name='ingredients'):
    """
    Validate and coerce an ingredient list.

    Entries may be IngredientInput instances, mappings or bare names.
    Names are trimmed; quantity and unit blanks become None.

    Raises:
        ValidationError: If value is not a list or any entry lacks a name
    """
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")

    errors = []
    result = []
    for index, entry in enumerate(value):
        try:
            ingredient = IngredientInput.coerce(entry)
        except TypeError:
            errors.append(f"Ingredient {index + 1} is not a valid ingredient")
            continue

        name = (ingredient.name or '').strip()
        if not name:
            errors.append(f"Ingredient {index + 1} must have a name")
            continue
        if len(name) > MAX_LENGTHS['ingredient_name']:
            errors.append(f"Ingredient {index + 1} name is too long")
            continue

        quantity = (ingredient.quantity or '').strip() or None
        unit = (ingredient.unit or '').strip() or None
        if quantity and len(quantity) > MAX_LENGTHS['quantity']:
            errors.append(f"Ingredient {index + 1} quantity is too long")
            continue
        if unit and len(unit) > MAX_LENGTHS['unit']:
            errors.append(f"Ingredient {index + 1} unit is too long")
            continue

        result.append(IngredientInput(name=name, quantity=quantity, unit=unit))

    if errors:
        raise ValidationError("Invalid ingredients", errors=errors)
    return result


def insert_ingredients(tx, kind, owner_id, ingredients):
    """Insert ingredient rows in list order; position is the list index."""
    table, owner_column = _table(kind)
    for position, ingredient in enumerate(ingredients):
        tx.execute(
            f"""
            INSERT INTO {table} ({owner_column}, name, quantity, unit, position)
            VALUES (:owner_id, :name, :quantity, :unit, :position)
            """,
            {
                'owner_id': owner_id,
                'name': ingredient.name,
                'quantity': ingredient.quantity,
                'unit': ingredient.unit,
                'position': position,
            },
        )


def delete_ingredients(tx, kind, owner_id):
    table, owner_column = _table(kind)
    tx.execute(f"DELETE FROM {table} WHERE {owner_column} = :owner_id", {'owner_id': owner_id})


def replace_ingredients(tx, kind, owner_id, ingredients):
    delete_ingredients(tx, kind, owner_id)
    insert_ingredients(tx, kind, owner_id, ingredients)


def fetch_ingredients(runner, kind, owner_id):
    """Ingredient lines of one owner, in position order."""
    table, owner_column = _table(kind)
    rows = runner.fetch_all(
        f"""
        SELECT name, quantity, unit, position
        FROM {table}
        WHERE {owner_column} = :owner_id
        ORDER BY position ASC, id ASC
        """,
        {'owner_id': owner_id},
    )
    return [IngredientView.from_row(row) for row in rows]


def copy_to_recipe(tx, kind, owner_id, recipe_id):
    """Copy a draft's ingredient lines verbatim (positions kept) onto a recipe."""
    table, owner_column = _table(kind)
    result = tx.execute(
        f"""
        INSERT INTO ingredients (recipe_id, name, quantity, unit, position)
        SELECT :recipe_id, name, quantity, unit, position
        FROM {table}
        WHERE {owner_column} = :owner_id
        ORDER BY position ASC, id ASC
        """,
        {'recipe_id': recipe_id, 'owner_id': owner_id},
    )
    return result.rows_affected
