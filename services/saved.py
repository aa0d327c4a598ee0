"""
Saved Recipes

Per-user bookmarks on canonical recipes. Bookmarks disappear with the
recipe (FK cascade).
"""

from sqlalchemy import delete, func, select

from models import Recipe, SavedRecipe, unix_now

from .errors import NotFound
from .recipes import SUMMARY_SELECT, summaries
from .tags import insert_ignore
from .validation import page_bounds

saved_table = SavedRecipe.__table__
recipes_table = Recipe.__table__


def _owned_by(user_id, recipe_id):
    return (saved_table.c.user_id == user_id) & (saved_table.c.recipe_id == recipe_id)


def save(store, user_id, recipe_id):
    """Bookmark a recipe. Saving twice is harmless."""
    def work(tx):
        exists = tx.fetch_one(select(recipes_table.c.id).where(recipes_table.c.id == recipe_id))
        if exists is None:
            raise NotFound(f"Recipe {recipe_id} not found")
        stmt = insert_ignore(saved_table, tx.dialect_name)
        tx.execute(stmt, {'user_id': user_id, 'recipe_id': recipe_id, 'saved_at': unix_now()})

    store.with_transaction(work)


def unsave(store, user_id, recipe_id):
    """Remove a bookmark. Returns False if there was none."""
    result = store.execute(delete(saved_table).where(_owned_by(user_id, recipe_id)))
    return result.rows_affected > 0


def is_saved(store, user_id, recipe_id):
    row = store.fetch_one(select(saved_table.c.id).where(_owned_by(user_id, recipe_id)))
    return row is not None


def list_saved(store, user_id, limit=50, offset=0):
    """
    A user's saved recipes, most recently saved first.

    Returns:
        (list of RecipeSummary, total saved)
    """
    limit, offset = page_bounds(limit, offset)

    def work(tx):
        rows = tx.fetch_all(
            SUMMARY_SELECT + """
            JOIN user_saved_recipes s ON s.recipe_id = r.id
            WHERE s.user_id = :user_id
            ORDER BY s.saved_at DESC, s.id DESC
            LIMIT :limit OFFSET :offset
            """,
            {'user_id': user_id, 'limit': limit, 'offset': offset},
        )
        total = tx.fetch_one(
            select(func.count().label('count'))
            .select_from(saved_table)
            .where(saved_table.c.user_id == user_id)
        )['count']
        return summaries(tx, rows), total

    return store.read(work)


def saved_ids(store, user_id):
    """Ids of every recipe the user has saved."""
    rows = store.fetch_all(
        select(saved_table.c.recipe_id)
        .where(saved_table.c.user_id == user_id)
        .order_by(saved_table.c.recipe_id)
    )
    return [row['recipe_id'] for row in rows]
