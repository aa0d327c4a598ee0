"""
Recipe Image Set

Per-recipe ordered image collection. Keeps at most one hero image per
recipe and keeps positions a dense 0..N-1 sequence between operations.
Files are written before any transaction opens and removed (best effort)
only after the owning rows are gone.
"""

import logging
import os
import uuid

from sqlalchemy import insert

from models import ImageMeta, RecipeImage, RecipeImageView, unix_now
from utils.image_handler import validate_and_process_image

from .errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

IMAGE_COLUMNS = """
    id, recipe_id, filename, original_name, file_path, file_size,
    mime_type, is_hero, position, uploaded_by, uploaded_at
"""


# ============================================
# FILE HANDLING
# ============================================

def store_upload(data, image_dir, original_name=None, prefix='recipe'):
    """
    Validate an uploaded or downloaded image and write it under image_dir.

    Runs before any database work. The image is re-encoded through Pillow,
    so the stored file is always a JPEG.

    Args:
        data: Raw image bytes or a file-like object
        image_dir: Directory the file is written to (created if missing)
        original_name: Client-side filename, kept for display
        prefix: Filename prefix for the generated name

    Returns:
        ImageMeta describing the written file

    Raises:
        ImageValidationError: If the data is not an acceptable image
    """
    os.makedirs(image_dir, exist_ok=True)
    target = os.path.join(image_dir, f"{prefix}-{uuid.uuid4().hex}.jpg")
    final_path = validate_and_process_image(data, target)
    return ImageMeta(
        filename=os.path.basename(final_path),
        file_path=final_path,
        original_name=original_name or os.path.basename(final_path),
        file_size=os.path.getsize(final_path),
        mime_type='image/jpeg',
    )


def remove_files(paths):
    """Delete image files from disk. Failures are logged, never raised."""
    for path in paths:
        if not path:
            continue
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Failed to delete image file %s: %s", path, e)


# ============================================
# READS
# ============================================

def fetch_images(runner, recipe_id):
    """Images of a recipe, hero first, then by position."""
    rows = runner.fetch_all(
        f"""
        SELECT {IMAGE_COLUMNS}
        FROM recipe_images
        WHERE recipe_id = :recipe_id
        ORDER BY is_hero DESC, position ASC
        """,
        {'recipe_id': recipe_id},
    )
    return [RecipeImageView.from_row(row) for row in rows]


def _fetch_image(runner, image_id):
    row = runner.fetch_one(
        f"SELECT {IMAGE_COLUMNS} FROM recipe_images WHERE id = :id",
        {'id': image_id},
    )
    return RecipeImageView.from_row(row) if row else None


def get_image(store, image_id):
    return _fetch_image(store, image_id)


def list_images(store, recipe_id):
    return fetch_images(store, recipe_id)


def get_hero(store, recipe_id):
    row = store.fetch_one(
        f"""
        SELECT {IMAGE_COLUMNS}
        FROM recipe_images
        WHERE recipe_id = :recipe_id AND is_hero = :hero
        """,
        {'recipe_id': recipe_id, 'hero': True},
    )
    return RecipeImageView.from_row(row) if row else None


def count_images(store, recipe_id):
    row = store.fetch_one(
        "SELECT COUNT(*) AS count FROM recipe_images WHERE recipe_id = :recipe_id",
        {'recipe_id': recipe_id},
    )
    return row['count']


# ============================================
# WRITES
# ============================================

def _clear_hero(tx, recipe_id):
    tx.execute(
        "UPDATE recipe_images SET is_hero = :off WHERE recipe_id = :recipe_id AND is_hero = :on",
        {'recipe_id': recipe_id, 'on': True, 'off': False},
    )


def insert_image(tx, recipe_id, meta, is_hero=False, uploaded_by=None):
    """Insert an image row at the next free position inside tx. Returns its id."""
    if is_hero:
        _clear_hero(tx, recipe_id)

    row = tx.fetch_one(
        "SELECT COALESCE(MAX(position), -1) + 1 AS next_position FROM recipe_images WHERE recipe_id = :recipe_id",
        {'recipe_id': recipe_id},
    )
    result = tx.execute(
        insert(RecipeImage.__table__),
        {
            'recipe_id': recipe_id,
            'filename': meta.filename,
            'original_name': meta.original_name,
            'file_path': meta.file_path,
            'file_size': meta.file_size or 0,
            'mime_type': meta.mime_type,
            'is_hero': bool(is_hero),
            'position': row['next_position'],
            'uploaded_by': uploaded_by,
            'uploaded_at': unix_now(),
        },
    )
    return result.generated_id


def add(store, recipe_id, meta, is_hero=False, uploaded_by=None):
    """Add an image to a recipe, optionally making it the hero image."""
    if not meta.filename or not meta.file_path:
        raise ValidationError("Image filename and file path are required")

    def work(tx):
        exists = tx.fetch_one("SELECT id FROM recipes WHERE id = :id", {'id': recipe_id})
        if not exists:
            raise NotFound(f"Recipe {recipe_id} not found")
        image_id = insert_image(tx, recipe_id, meta, is_hero=is_hero, uploaded_by=uploaded_by)
        return _fetch_image(tx, image_id)

    image = store.with_transaction(work)
    logger.info("Added image %s to recipe %s (hero=%s)", image.id, recipe_id, image.is_hero)
    return image


def set_hero(store, image_id, recipe_id):
    """Make image_id the recipe's only hero image."""
    def work(tx):
        owned = tx.fetch_one(
            "SELECT id FROM recipe_images WHERE id = :id AND recipe_id = :recipe_id",
            {'id': image_id, 'recipe_id': recipe_id},
        )
        if not owned:
            raise NotFound(f"Image {image_id} not found for recipe {recipe_id}")
        _clear_hero(tx, recipe_id)
        tx.execute(
            "UPDATE recipe_images SET is_hero = :on WHERE id = :id AND recipe_id = :recipe_id",
            {'id': image_id, 'recipe_id': recipe_id, 'on': True},
        )
        return _fetch_image(tx, image_id)

    return store.with_transaction(work)


def reorder(store, recipe_id, ordered_ids):
    """
    Set position = index for each image id, in the order given.

    Every id must belong to recipe_id, appear once, and together they must
    cover all of the recipe's images; otherwise nothing is written.
    """
    if not isinstance(ordered_ids, (list, tuple)):
        raise ValidationError("Image ids must be a list")
    try:
        ordered_ids = [int(image_id) for image_id in ordered_ids]
    except (TypeError, ValueError):
        raise ValidationError("Image ids must be integers")
    if len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError("Image ids must not repeat")

    def work(tx):
        rows = tx.fetch_all(
            "SELECT id FROM recipe_images WHERE recipe_id = :recipe_id",
            {'recipe_id': recipe_id},
        )
        owned = {row['id'] for row in rows}
        foreign = [image_id for image_id in ordered_ids if image_id not in owned]
        if foreign:
            raise ValidationError(
                "Some images do not belong to this recipe",
                errors=[f"Image {image_id} does not belong to recipe {recipe_id}" for image_id in foreign],
            )
        if set(ordered_ids) != owned:
            raise ValidationError("Reorder must list every image of the recipe")

        for index, image_id in enumerate(ordered_ids):
            tx.execute(
                "UPDATE recipe_images SET position = :position WHERE id = :id AND recipe_id = :recipe_id",
                {'position': index, 'id': image_id, 'recipe_id': recipe_id},
            )
        return fetch_images(tx, recipe_id)

    return store.with_transaction(work)


def _compact_positions(tx, recipe_id):
    rows = tx.fetch_all(
        "SELECT id, position FROM recipe_images WHERE recipe_id = :recipe_id ORDER BY position, id",
        {'recipe_id': recipe_id},
    )
    for index, row in enumerate(rows):
        if row['position'] != index:
            tx.execute(
                "UPDATE recipe_images SET position = :position WHERE id = :id",
                {'position': index, 'id': row['id']},
            )


def delete(store, image_id):
    """
    Delete an image row, then its file.

    The row is authoritative: a file that cannot be removed is logged and
    otherwise ignored.
    """
    def work(tx):
        image = _fetch_image(tx, image_id)
        if image is None:
            return None
        tx.execute("DELETE FROM recipe_images WHERE id = :id", {'id': image_id})
        _compact_positions(tx, image.recipe_id)
        return image

    image = store.with_transaction(work)
    if image is None:
        return False

    remove_files([image.file_path])
    logger.info("Deleted image %s from recipe %s", image_id, image.recipe_id)
    return True


def delete_for_recipe(tx, recipe_id):
    """Delete a recipe's image rows inside tx. Returns file paths to remove after commit."""
    rows = tx.fetch_all(
        "SELECT file_path FROM recipe_images WHERE recipe_id = :recipe_id",
        {'recipe_id': recipe_id},
    )
    tx.execute("DELETE FROM recipe_images WHERE recipe_id = :recipe_id", {'recipe_id': recipe_id})
    return [row['file_path'] for row in rows]
