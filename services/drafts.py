"""
Draft Tag Rows

Pending imports and user submissions keep their tags as raw strings until
promotion; the Tag Registry normalizes them only when a draft becomes a
canonical recipe.
"""

from constants import MAX_LENGTHS

from . import tags as tag_registry
from .errors import ValidationError

# Draft kind -> (tag table, owner column). Table names never come from callers.
DRAFT_TAG_TABLES = {
    'pending': ('pending_tags', 'pending_recipe_id'),
    'submission': ('user_submitted_tags', 'submitted_recipe_id'),
}


def _table(kind):
    try:
        return DRAFT_TAG_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown draft kind: {kind}")


def clean_draft_tags(value):
    """Tag strings as given, minus blanks and non-strings. Not lowercased."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Tags must be a list")
    cleaned = []
    for tag in value:
        if not isinstance(tag, str) or not tag.strip():
            continue
        if len(tag.strip()) > MAX_LENGTHS['tag_name']:
            raise ValidationError(f"Tag '{tag[:20]}...' is too long")
        cleaned.append(tag.strip())
    return cleaned


def insert_draft_tags(tx, kind, draft_id, names):
    table, owner_column = _table(kind)
    for name in names:
        tx.execute(
            f"INSERT INTO {table} ({owner_column}, tag_name) VALUES (:draft_id, :tag_name)",
            {'draft_id': draft_id, 'tag_name': name},
        )


def replace_draft_tags(tx, kind, draft_id, names):
    table, owner_column = _table(kind)
    tx.execute(f"DELETE FROM {table} WHERE {owner_column} = :draft_id", {'draft_id': draft_id})
    insert_draft_tags(tx, kind, draft_id, names)


def fetch_draft_tags(runner, kind, draft_id):
    """Raw tag strings of a draft, in insertion order."""
    table, owner_column = _table(kind)
    rows = runner.fetch_all(
        f"SELECT tag_name FROM {table} WHERE {owner_column} = :draft_id ORDER BY id",
        {'draft_id': draft_id},
    )
    return [row['tag_name'] for row in rows]


def promote_tags(tx, kind, draft_id, recipe_id):
    """Link a draft's tags to a recipe through the registry (normalized, deduped)."""
    return tag_registry.attach_tags(tx, recipe_id, fetch_draft_tags(tx, kind, draft_id))
