"""
Pending Recipes

AI-parsed drafts from PDF or URL imports awaiting admin approval. A pending
recipe has no review status: approval deletes it (see moderation).
"""

import json
import logging

from sqlalchemy import insert

from models import PendingRecipe, PendingRecipeDetail, PendingRecipeSummary, unix_now
from constants import MAX_LENGTHS

from .drafts import clean_draft_tags, fetch_draft_tags, insert_draft_tags, replace_draft_tags
from .errors import NotFound
from .images import remove_files
from .ingredients import coerce_ingredients, fetch_ingredients, insert_ingredients, replace_ingredients
from .store import update_columns
from .validation import optional_text

logger = logging.getLogger(__name__)

PENDING_SELECT = """
    SELECT
        pr.id, pr.file_id, pr.title, pr.source, pr.category, pr.description,
        pr.instructions, pr.raw_text, pr.parsed_data, pr.image_filename,
        pr.image_original_name, pr.image_file_path, pr.image_file_size,
        pr.image_mime_type, pr.created_at, uf.original_name
    FROM pending_recipes pr
    LEFT JOIN uploaded_files uf ON uf.id = pr.file_id
"""


def _encode_parsed_data(parsed_data):
    if parsed_data is None or isinstance(parsed_data, str):
        return parsed_data
    return json.dumps(parsed_data)


def _draft_fields(draft):
    return {
        'title': optional_text(draft.title, 'Title', MAX_LENGTHS['pending_title']),
        'source': optional_text(draft.source, 'Source', MAX_LENGTHS['pending_title']),
        'category': optional_text(draft.category, 'Category', MAX_LENGTHS['title']),
        'description': draft.description,
        'instructions': draft.instructions,
    }


# ============================================
# CREATE
# ============================================

def insert_pending(tx, file_id, draft, raw_text=None, parsed_data=None, image=None):
    """
    Insert a parsed draft with its ingredients and raw tag strings inside tx.

    Args:
        file_id: uploaded_files row the draft came from
        draft: DraftInput
        raw_text: Extracted source text
        parsed_data: Parser output (dict or JSON string), stored as JSON text
        image: Optional ImageMeta of an image downloaded for the draft

    Returns:
        New pending recipe id
    """
    fields = _draft_fields(draft)
    ingredient_list = coerce_ingredients(draft.ingredients)
    tag_names = clean_draft_tags(draft.tags)

    values = dict(fields)
    values.update({
        'file_id': file_id,
        'raw_text': raw_text,
        'parsed_data': _encode_parsed_data(parsed_data),
        'created_at': unix_now(),
    })
    if image is not None:
        values.update({
            'image_filename': image.filename,
            'image_original_name': image.original_name,
            'image_file_path': image.file_path,
            'image_file_size': image.file_size,
            'image_mime_type': image.mime_type,
        })

    pending_id = tx.execute(insert(PendingRecipe.__table__), values).generated_id
    insert_ingredients(tx, 'pending', pending_id, ingredient_list)
    insert_draft_tags(tx, 'pending', pending_id, tag_names)
    return pending_id


def create_pending(store, file_id, draft, raw_text=None, parsed_data=None, image=None):
    """Store a parsed draft in its own transaction. Returns the new id."""
    pending_id = store.with_transaction(
        lambda tx: insert_pending(
            tx, file_id, draft, raw_text=raw_text, parsed_data=parsed_data, image=image,
        )
    )
    logger.info("Created pending recipe %s from file %s", pending_id, file_id)
    return pending_id


# ============================================
# READ
# ============================================

def load_pending(runner, pending_id):
    row = runner.fetch_one(PENDING_SELECT + " WHERE pr.id = :id", {'id': pending_id})
    if row is None:
        return None
    return PendingRecipeDetail.from_row(
        row,
        ingredients=fetch_ingredients(runner, 'pending', pending_id),
        tags=fetch_draft_tags(runner, 'pending', pending_id),
    )


def get_pending(store, pending_id):
    return store.read(lambda tx: load_pending(tx, pending_id))


def list_pending(store):
    """All pending recipes, newest first."""
    rows = store.fetch_all(PENDING_SELECT + " ORDER BY pr.created_at DESC, pr.id DESC")
    return [PendingRecipeSummary.from_row(row) for row in rows]


def list_pending_by_file(store, file_id):
    rows = store.fetch_all(
        PENDING_SELECT + " WHERE pr.file_id = :file_id ORDER BY pr.created_at DESC, pr.id DESC",
        {'file_id': file_id},
    )
    return [PendingRecipeSummary.from_row(row) for row in rows]


# ============================================
# UPDATE / DELETE
# ============================================

def update_pending(store, pending_id, changes):
    """
    Apply a DraftUpdate to a pending recipe.

    Raises:
        NotFound: If the pending recipe does not exist
    """
    values = {}
    if changes.title is not None:
        values['title'] = optional_text(changes.title, 'Title', MAX_LENGTHS['pending_title'])
    if changes.source is not None:
        values['source'] = optional_text(changes.source, 'Source', MAX_LENGTHS['pending_title'])
    if changes.category is not None:
        values['category'] = optional_text(changes.category, 'Category', MAX_LENGTHS['title'])
    if changes.description is not None:
        values['description'] = changes.description
    if changes.instructions is not None:
        values['instructions'] = changes.instructions

    ingredient_list = None
    if changes.ingredients is not None:
        ingredient_list = coerce_ingredients(changes.ingredients)
    tag_names = None
    if changes.tags is not None:
        tag_names = clean_draft_tags(changes.tags)

    def work(tx):
        exists = tx.fetch_one("SELECT id FROM pending_recipes WHERE id = :id", {'id': pending_id})
        if not exists:
            raise NotFound(f"Pending recipe {pending_id} not found")
        if values:
            update_columns(tx, 'pending_recipes', pending_id, values)
        if ingredient_list is not None:
            replace_ingredients(tx, 'pending', pending_id, ingredient_list)
        if tag_names is not None:
            replace_draft_tags(tx, 'pending', pending_id, tag_names)
        return load_pending(tx, pending_id)

    return store.with_transaction(work)


def delete_pending(store, pending_id, remove_image=True):
    """
    Delete a pending recipe (its ingredients and tags cascade).

    The downloaded image file, if any, is removed after commit.

    Returns:
        True if a draft was deleted
    """
    def work(tx):
        row = tx.fetch_one(
            "SELECT image_file_path FROM pending_recipes WHERE id = :id",
            {'id': pending_id},
        )
        if row is None:
            return None
        tx.execute("DELETE FROM pending_recipes WHERE id = :id", {'id': pending_id})
        return row

    row = store.with_transaction(work)
    if row is None:
        return False

    if remove_image and row['image_file_path']:
        remove_files([row['image_file_path']])
    logger.info("Deleted pending recipe %s", pending_id)
    return True
