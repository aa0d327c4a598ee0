"""
Recipe Aggregate

Create, read, search, update and delete canonical recipes together with
their ordered ingredients, tag links and image set. Every multi-row write
runs inside one Store transaction.
"""

import logging
import os

from sqlalchemy import bindparam, insert, text

from models import AdminRecipeRow, DashboardStats, Recipe, RecipeDetail, RecipeSummary, unix_now
from constants import (
    ADMIN_SORT_COLUMNS,
    DEFAULT_PAGE_LIMIT,
    MAX_LENGTHS,
    STATUS_PENDING,
    VALID_CALORIE_CONFIDENCE,
    VALID_SORT_ORDERS,
)

from . import images
from . import tags as tag_registry
from .errors import NotFound, ValidationError
from .ingredients import coerce_ingredients, fetch_ingredients, insert_ingredients, replace_ingredients
from .parsing import safe_int
from .store import update_columns
from .validation import optional_positive_int, optional_text, page_bounds, require_list, require_text

logger = logging.getLogger(__name__)

RECENT_WINDOW_SECONDS = 7 * 24 * 60 * 60

SUMMARY_SELECT = """
    SELECT
        r.id, r.title, r.source, r.date_added, r.image_path,
        (SELECT ri.filename FROM recipe_images ri
         WHERE ri.recipe_id = r.id
         ORDER BY ri.is_hero DESC, ri.position ASC
         LIMIT 1) AS hero_image_filename
    FROM recipes r
"""

DETAIL_COLUMNS = """
    id, title, source, instructions, servings, image_path, estimated_calories,
    calories_confidence, times_cooked, date_added, created_at, updated_at
"""


# ============================================
# READ HELPERS
# ============================================

def load_detail(runner, recipe_id):
    """Hydrated RecipeDetail read through runner (store or transaction)."""
    row = runner.fetch_one(
        f"SELECT {DETAIL_COLUMNS} FROM recipes WHERE id = :id",
        {'id': recipe_id},
    )
    if row is None:
        return None
    return RecipeDetail.from_row(
        row,
        tags=tag_registry.recipe_tag_names(runner, recipe_id),
        ingredients=fetch_ingredients(runner, 'recipe', recipe_id),
        images=images.fetch_images(runner, recipe_id),
    )


def tags_by_recipe(runner, recipe_ids):
    """Map recipe id -> alphabetical tag names, in one query for a whole page."""
    grouped = {recipe_id: [] for recipe_id in recipe_ids}
    if not recipe_ids:
        return grouped

    stmt = text(
        """
        SELECT rt.recipe_id, t.name
        FROM recipe_tags rt
        JOIN tags t ON t.id = rt.tag_id
        WHERE rt.recipe_id IN :ids
        ORDER BY rt.recipe_id, t.name
        """
    ).bindparams(bindparam('ids', expanding=True))
    for row in runner.fetch_all(stmt, {'ids': list(recipe_ids)}):
        grouped[row['recipe_id']].append(row['name'])
    return grouped


def summaries(runner, rows):
    """RecipeSummary list for rows selected with SUMMARY_SELECT."""
    grouped = tags_by_recipe(runner, [row['id'] for row in rows])
    return [RecipeSummary.from_row(row, tags=grouped[row['id']]) for row in rows]


def _require_recipe(runner, recipe_id):
    row = runner.fetch_one("SELECT id FROM recipes WHERE id = :id", {'id': recipe_id})
    if row is None:
        raise NotFound(f"Recipe {recipe_id} not found")


# ============================================
# CREATE
# ============================================

def insert_recipe(tx, title, source=None, instructions=None, servings=None, image_path=None):
    """Insert the recipe row only. Returns the new id."""
    now = unix_now()
    result = tx.execute(
        insert(Recipe.__table__),
        {
            'title': title,
            'source': source,
            'instructions': instructions,
            'servings': servings,
            'image_path': image_path,
            'date_added': now,
            'times_cooked': 0,
            'created_at': now,
            'updated_at': now,
        },
    )
    return result.generated_id


def create(store, title, source=None, instructions=None, ingredients=(), tags=(),
           servings=None, image_path=None):
    """
    Create a recipe with its ingredients and tags in one transaction.

    Args:
        store: Store the recipe is written to
        title: Required, non-blank
        ingredients: List of IngredientInput, dicts or bare names
        tags: List of tag names (normalized and deduped)

    Returns:
        RecipeDetail of the new recipe

    Raises:
        ValidationError: On blank title or malformed ingredients/tags
    """
    title = require_text(title, 'Title', MAX_LENGTHS['title'])
    source = optional_text(source, 'Source', MAX_LENGTHS['source'])
    servings = optional_positive_int(servings, 'Servings')
    ingredient_list = coerce_ingredients(ingredients)
    tag_names = tag_registry.validate_tags(tags)

    def work(tx):
        recipe_id = insert_recipe(
            tx, title, source=source, instructions=instructions,
            servings=servings, image_path=image_path,
        )
        insert_ingredients(tx, 'recipe', recipe_id, ingredient_list)
        tag_registry.attach_tags(tx, recipe_id, tag_names)
        return load_detail(tx, recipe_id)

    recipe = store.with_transaction(work)
    logger.info("Created recipe %s: %s", recipe.id, recipe.title)
    return recipe


# ============================================
# READ
# ============================================

def get(store, recipe_id):
    """Recipe with tags, ingredients and images, all read from one snapshot."""
    return store.read(lambda tx: load_detail(tx, recipe_id))


def list_recipes(store, limit=DEFAULT_PAGE_LIMIT, offset=0):
    """
    Page of recipes, newest first.

    Returns:
        (list of RecipeSummary, total recipe count)
    """
    limit, offset = page_bounds(limit, offset)

    def work(tx):
        rows = tx.fetch_all(
            SUMMARY_SELECT + """
            ORDER BY r.date_added DESC, r.id DESC
            LIMIT :limit OFFSET :offset
            """,
            {'limit': limit, 'offset': offset},
        )
        return summaries(tx, rows), count(tx)

    return store.read(work)


def _contains(value):
    """LIKE pattern matching value as a literal, lowercased substring."""
    escaped = value.lower().replace('!', '!!').replace('%', '!%').replace('_', '!_')
    return f"%{escaped}%"


def _clean_names(values, field_name):
    values = require_list(values, field_name)
    cleaned = []
    for value in values:
        if value is None:
            continue
        name = str(value).strip().lower()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


def search(store, title=None, ingredient=None, ingredients=None, tags=None):
    """
    Search recipes. Filters combine with AND.

    Args:
        title: Case-insensitive substring of the title
        ingredient: Case-insensitive substring of any ingredient name
        ingredients: Names that must all be present (trimmed, case-insensitive, exact)
        tags: Tag names, any of which may match

    Raises:
        ValidationError: If no filter is given
    """
    conditions = []
    params = {}
    bind_lists = []

    title = (title or '').strip()
    if title:
        conditions.append("LOWER(r.title) LIKE :title ESCAPE '!'")
        params['title'] = _contains(title)

    ingredient = (ingredient or '').strip()
    if ingredient:
        conditions.append(
            "r.id IN (SELECT recipe_id FROM ingredients WHERE LOWER(TRIM(name)) LIKE :ingredient ESCAPE '!')"
        )
        params['ingredient'] = _contains(ingredient)

    if ingredients is not None:
        names = _clean_names(ingredients, 'Ingredients')
        if names:
            conditions.append(
                """
                r.id IN (
                    SELECT recipe_id
                    FROM ingredients
                    WHERE LOWER(TRIM(name)) IN :ingredient_names
                    GROUP BY recipe_id
                    HAVING COUNT(DISTINCT LOWER(TRIM(name))) = :ingredient_count
                )
                """
            )
            params['ingredient_names'] = names
            params['ingredient_count'] = len(names)
            bind_lists.append('ingredient_names')

    if tags is not None:
        tag_names = tag_registry.normalize_tags(require_list(tags, 'Tags'))
        if tag_names:
            conditions.append(
                """
                r.id IN (
                    SELECT rt.recipe_id
                    FROM recipe_tags rt
                    JOIN tags t ON t.id = rt.tag_id
                    WHERE t.name IN :tag_names
                )
                """
            )
            params['tag_names'] = tag_names
            bind_lists.append('tag_names')

    if not conditions:
        raise ValidationError("At least one search parameter is required")

    stmt = text(
        SUMMARY_SELECT
        + " WHERE " + " AND ".join(conditions)
        + " ORDER BY r.date_added DESC, r.id DESC"
    )
    if bind_lists:
        stmt = stmt.bindparams(*[bindparam(name, expanding=True) for name in bind_lists])

    return store.read(lambda tx: summaries(tx, tx.fetch_all(stmt, params)))


# ============================================
# UPDATE
# ============================================

def update(store, recipe_id, changes):
    """
    Apply a RecipeUpdate.

    Scalar fields set to None are left alone. ingredients/tags, when not
    None, replace the existing lists entirely ([] clears them).

    Raises:
        NotFound: If the recipe does not exist
        ValidationError: On invalid field values
    """
    values = {}
    if changes.title is not None:
        values['title'] = require_text(changes.title, 'Title', MAX_LENGTHS['title'])
    if changes.source is not None:
        values['source'] = optional_text(changes.source, 'Source', MAX_LENGTHS['source'])
    if changes.instructions is not None:
        values['instructions'] = changes.instructions
    if changes.servings is not None:
        values['servings'] = optional_positive_int(changes.servings, 'Servings')
    if changes.image_path is not None:
        values['image_path'] = changes.image_path or None
    values['updated_at'] = unix_now()

    ingredient_list = None
    if changes.ingredients is not None:
        ingredient_list = coerce_ingredients(changes.ingredients)
    tag_names = None
    if changes.tags is not None:
        tag_names = tag_registry.validate_tags(changes.tags)

    def work(tx):
        _require_recipe(tx, recipe_id)
        update_columns(tx, 'recipes', recipe_id, values)
        if ingredient_list is not None:
            replace_ingredients(tx, 'recipe', recipe_id, ingredient_list)
        if tag_names is not None:
            tag_registry.replace_recipe_tags(tx, recipe_id, tag_names)
            tag_registry.cleanup_orphans(tx)
        return load_detail(tx, recipe_id)

    return store.with_transaction(work)


def update_calories(store, recipe_id, estimated_calories, calories_confidence=None):
    """Record a calorie estimate. Confidence must be low, medium or high when given."""
    if estimated_calories is not None:
        calories = safe_int(estimated_calories)
        if calories is None or calories < 0:
            raise ValidationError("Estimated calories must be a non-negative number")
        estimated_calories = calories
    if calories_confidence is not None and calories_confidence not in VALID_CALORIE_CONFIDENCE:
        raise ValidationError(
            f"Calories confidence must be one of: {', '.join(sorted(VALID_CALORIE_CONFIDENCE))}"
        )

    def work(tx):
        _require_recipe(tx, recipe_id)
        update_columns(tx, 'recipes', recipe_id, {
            'estimated_calories': estimated_calories,
            'calories_confidence': calories_confidence,
            'updated_at': unix_now(),
        })
        return load_detail(tx, recipe_id)

    return store.with_transaction(work)


def increment_times_cooked(store, recipe_id):
    def work(tx):
        result = tx.execute(
            """
            UPDATE recipes
            SET times_cooked = times_cooked + 1, updated_at = :now
            WHERE id = :id
            """,
            {'id': recipe_id, 'now': unix_now()},
        )
        if result.rows_affected == 0:
            raise NotFound(f"Recipe {recipe_id} not found")
        return load_detail(tx, recipe_id)

    return store.with_transaction(work)


# ============================================
# DELETE
# ============================================

def delete(store, recipe_id, image_dir=None):
    """
    Delete a recipe and everything it owns.

    Ingredients, tag links and image rows go with the recipe row (FK
    cascade, image rows also removed explicitly so their paths are known).
    Tags left without recipes are swept in the same transaction. Image
    files are removed after commit; a file that cannot be removed is
    logged, not raised.

    Args:
        image_dir: Optional directory; when given, only files inside it are removed

    Returns:
        True if a recipe was deleted, False if it did not exist
    """
    def work(tx):
        paths = images.delete_for_recipe(tx, recipe_id)
        result = tx.execute("DELETE FROM recipes WHERE id = :id", {'id': recipe_id})
        if result.rows_affected == 0:
            return None
        tag_registry.cleanup_orphans(tx)
        return paths

    paths = store.with_transaction(work)
    if paths is None:
        return False

    if image_dir is not None:
        paths = [path for path in paths if _inside(path, image_dir)]
    images.remove_files(paths)
    logger.info("Deleted recipe %s (%d image file(s))", recipe_id, len(paths))
    return True


def _inside(path, directory):
    root = os.path.realpath(directory)
    return os.path.realpath(path).startswith(root + os.sep)


# ============================================
# ADMIN
# ============================================

def list_admin(store, limit=DEFAULT_PAGE_LIMIT, offset=0, sort_by='date_added', sort_order='DESC'):
    """
    Admin table page. Unknown sort columns fall back to date_added, unknown
    orders to DESC. category is the alphabetically first tag, main_ingredient
    the first ingredient line.

    Returns:
        (list of AdminRecipeRow, total recipe count)
    """
    limit, offset = page_bounds(limit, offset)
    sort_by = sort_by if sort_by in ADMIN_SORT_COLUMNS else 'date_added'
    sort_order = (sort_order or '').upper()
    sort_order = sort_order if sort_order in VALID_SORT_ORDERS else 'DESC'

    # sort_by and sort_order are whitelisted above
    rows = store.fetch_all(
        f"""
        SELECT
            r.id, r.title, r.date_added, r.estimated_calories, r.times_cooked,
            (SELECT t.name FROM tags t
             JOIN recipe_tags rt ON rt.tag_id = t.id
             WHERE rt.recipe_id = r.id
             ORDER BY t.name
             LIMIT 1) AS category,
            (SELECT i.name FROM ingredients i
             WHERE i.recipe_id = r.id
             ORDER BY i.position
             LIMIT 1) AS main_ingredient
        FROM recipes r
        ORDER BY r.{sort_by} {sort_order}, r.id {sort_order}
        LIMIT :limit OFFSET :offset
        """,
        {'limit': limit, 'offset': offset},
    )
    return [AdminRecipeRow.from_row(row) for row in rows], count(store)


def count(runner):
    row = runner.fetch_one("SELECT COUNT(*) AS count FROM recipes")
    return row['count']


def dashboard_stats(store):
    """Counts shown on the admin dashboard."""
    row = store.fetch_one(
        """
        SELECT
            (SELECT COUNT(*) FROM recipes) AS total_recipes,
            (SELECT COUNT(*) FROM pending_recipes) AS pending_recipes,
            (SELECT COUNT(*) FROM user_submitted_recipes WHERE status = :pending) AS pending_submissions,
            (SELECT COUNT(DISTINCT rt.tag_id) FROM recipe_tags rt) AS categories_count,
            (SELECT COUNT(*) FROM recipes WHERE date_added >= :since) AS recent_recipes,
            (SELECT AVG(estimated_calories) FROM recipes
             WHERE estimated_calories IS NOT NULL) AS avg_calories,
            (SELECT COUNT(*) FROM recipes
             WHERE estimated_calories IS NOT NULL) AS recipes_with_calories
        """,
        {'pending': STATUS_PENDING, 'since': unix_now() - RECENT_WINDOW_SECONDS},
    )
    return DashboardStats(
        total_recipes=row['total_recipes'],
        pending_recipes=row['pending_recipes'],
        pending_submissions=row['pending_submissions'],
        categories_count=row['categories_count'],
        recent_recipes=row['recent_recipes'],
        avg_calories=int(round(float(row['avg_calories'] or 0))),
        recipes_with_calories=row['recipes_with_calories'],
    )
