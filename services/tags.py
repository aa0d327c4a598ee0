"""
Tag Registry

Upsert-or-fetch for deduplicated tag names, recipe links, and the sweep
that removes tags no recipe references any more.

Tag names are normalized (trimmed, lowercased) here and only here.
"""

from sqlalchemy import insert, select

from models import Tag, recipe_tags, unix_now
from constants import MAX_LENGTHS

from .errors import ValidationError

tags_table = Tag.__table__


def normalize_tag(name):
    """Trim and lowercase a tag name. Returns '' for blank input."""
    if name is None:
        return ''
    return str(name).strip().lower()


def normalize_tags(names):
    """Normalize tag names, drop blanks, dedupe keeping first-seen order."""
    seen = []
    for name in names or []:
        normalized = normalize_tag(name)
        if normalized and normalized not in seen:
            seen.append(normalized)
    return seen


def validate_tags(value):
    """
    Check a caller-supplied tag list and return it normalized.

    Raises:
        ValidationError: If value is not a list, or an entry is not text or
            is longer than a tag name may be
    """
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Tags must be a list")

    limit = MAX_LENGTHS['tag_name']
    errors = []
    for index, tag in enumerate(value):
        if not isinstance(tag, str):
            errors.append(f"Tag {index + 1} must be text")
        elif len(tag.strip()) > limit:
            errors.append(f"Tag {index + 1} must be {limit} characters or less")
    if errors:
        raise ValidationError("Invalid tags", errors=errors)
    return normalize_tags(value)


def insert_ignore(table, dialect_name):
    """INSERT that silently skips rows colliding with a unique key."""
    if dialect_name == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert
        return sqlite_insert(table).on_conflict_do_nothing()
    if dialect_name == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert as pg_insert
        return pg_insert(table).on_conflict_do_nothing()
    if dialect_name in ('mysql', 'mariadb'):
        return insert(table).prefix_with('IGNORE')
    raise NotImplementedError(f"insert-or-ignore not supported for {dialect_name}")


def get_or_create(tx, name):
    """
    Return the id of the tag with this name, creating it if needed.

    Uses insert-or-ignore then re-select so concurrent callers racing on the
    same new name both end up with the single row the unique constraint allows.

    Raises:
        ValidationError: If the name is blank or too long
    """
    normalized = normalize_tag(name)
    if not normalized:
        raise ValidationError("Tag name must not be blank")
    if len(normalized) > MAX_LENGTHS['tag_name']:
        raise ValidationError(f"Tag name must be {MAX_LENGTHS['tag_name']} characters or less")

    stmt = insert_ignore(tags_table, tx.dialect_name)
    tx.execute(stmt, {'name': normalized, 'created_at': unix_now()})
    row = tx.fetch_one(select(tags_table.c.id).where(tags_table.c.name == normalized))
    return row['id']

def link(tx, recipe_id, tag_id):
    """Attach a tag to a recipe. Linking twice is harmless."""
    stmt = insert_ignore(recipe_tags, tx.dialect_name)
    tx.execute(stmt, {'recipe_id': recipe_id, 'tag_id': tag_id})


def attach_tags(tx, recipe_id, names):
    """Get-or-create and link every normalized, deduped name. Returns the names."""
    normalized = normalize_tags(names)
    for name in normalized:
        link(tx, recipe_id, get_or_create(tx, name))
    return normalized


def replace_recipe_tags(tx, recipe_id, names):
    """Swap a recipe's whole tag set for names (an empty list clears it)."""
    tx.execute("DELETE FROM recipe_tags WHERE recipe_id = :recipe_id", {'recipe_id': recipe_id})
    return attach_tags(tx, recipe_id, names)


def cleanup_orphans(runner):
    """Delete every tag with no recipe_tags references. Returns how many went."""
    result = runner.execute(
        "DELETE FROM tags WHERE id NOT IN (SELECT DISTINCT tag_id FROM recipe_tags)"
    )
    return result.rows_affected


def recipe_tag_names(runner, recipe_id):
    """Tag names linked to one recipe, alphabetical."""
    rows = runner.fetch_all(
        """
        SELECT t.name
        FROM tags t
        JOIN recipe_tags rt ON rt.tag_id = t.id
        WHERE rt.recipe_id = :recipe_id
        ORDER BY t.name
        """,
        {'recipe_id': recipe_id},
    )
    return [row['name'] for row in rows]


def list_used_tags(store):
    """Names of tags used by at least one recipe, alphabetical."""
    rows = store.fetch_all(
        """
        SELECT DISTINCT t.name
        FROM tags t
        JOIN recipe_tags rt ON rt.tag_id = t.id
        ORDER BY t.name
        """
    )
    return [row['name'] for row in rows]
