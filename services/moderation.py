"""
Moderation

Promotes drafts into canonical recipes. User submissions move
pending -> approved | rejected exactly once; pending imports are deleted
when approved. Each operation is one transaction: if any step fails,
nothing about the draft or the new recipe is kept.
"""

import logging

from models import ApprovalResult, ImageMeta, unix_now
from constants import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED

from . import pending
from .drafts import promote_tags
from .errors import NOT_FOUND_OR_REVIEWED, Conflict, NotFound, ValidationError
from .images import insert_image
from .ingredients import copy_to_recipe
from .recipes import insert_recipe
from .submissions import raise_missing_or_reviewed

logger = logging.getLogger(__name__)


# ============================================
# USER SUBMISSIONS
# ============================================

def _claim(tx, submission_id, status, admin_id, notes):
    """Move a pending submission to status. Zero rows means someone else got there first."""
    now = unix_now()
    result = tx.execute(
        """
        UPDATE user_submitted_recipes
        SET status = :status, admin_notes = :notes, reviewed_by = :admin_id,
            reviewed_at = :now, updated_at = :now
        WHERE id = :id AND status = :pending
        """,
        {
            'id': submission_id,
            'status': status,
            'notes': notes,
            'admin_id': admin_id,
            'now': now,
            'pending': STATUS_PENDING,
        },
    )
    if result.rows_affected == 0:
        raise_missing_or_reviewed(tx, submission_id)


def approve_submission(store, submission_id, admin_id, notes=None):
    """
    Approve a pending submission and copy it into a new recipe.

    Returns:
        New recipe id

    Raises:
        NotFound: If the submission does not exist
        Conflict: If it was already approved or rejected
    """
    def work(tx):
        # Claiming first serialises concurrent approvals on the row lock
        _claim(tx, submission_id, STATUS_APPROVED, admin_id, notes)

        draft = tx.fetch_one(
            """
            SELECT title, source, instructions, servings
            FROM user_submitted_recipes
            WHERE id = :id
            """,
            {'id': submission_id},
        )
        recipe_id = insert_recipe(
            tx,
            draft['title'],
            source=draft['source'],
            instructions=draft['instructions'],
            servings=draft['servings'],
        )
        copy_to_recipe(tx, 'submission', submission_id, recipe_id)
        promote_tags(tx, 'submission', submission_id, recipe_id)
        return recipe_id

    recipe_id = store.with_transaction(work)
    logger.info("Admin %s approved submission %s as recipe %s", admin_id, submission_id, recipe_id)
    return recipe_id


def reject_submission(store, submission_id, admin_id, notes):
    """
    Reject a pending submission. A reason is required.

    Raises:
        ValidationError: If notes are blank
        NotFound / Conflict: As for approval
    """
    if notes is None or not str(notes).strip():
        raise ValidationError("Rejection reason is required")

    store.with_transaction(
        lambda tx: _claim(tx, submission_id, STATUS_REJECTED, admin_id, str(notes).strip())
    )
    logger.info("Admin %s rejected submission %s", admin_id, submission_id)


def delete_submission(store, submission_id, owner_id=None):
    """
    Withdraw a submission. Only pending submissions (owned by owner_id, when
    given) can be deleted; anything else is left alone.

    Returns:
        True if a submission was deleted
    """
    conditions = "id = :id AND status = :pending"
    params = {'id': submission_id, 'pending': STATUS_PENDING}
    if owner_id is not None:
        conditions += " AND user_id = :owner_id"
        params['owner_id'] = owner_id

    result = store.execute(f"DELETE FROM user_submitted_recipes WHERE {conditions}", params)
    deleted = result.rows_affected > 0
    if deleted:
        logger.info("Deleted submission %s", submission_id)
    return deleted


# ============================================
# PENDING IMPORTS
# ============================================

def approve_pending(store, pending_id, admin_id):
    """
    Promote a pending import into a recipe.

    The draft's downloaded image, if any, becomes the recipe's hero image;
    the file stays where it is and now belongs to the recipe.

    Returns:
        ApprovalResult(recipe_id, image_created)

    Raises:
        NotFound: If the pending recipe does not exist
        Conflict: If it was approved or deleted concurrently
        ValidationError: If the draft has no title
    """
    def work(tx):
        draft = tx.fetch_one(
            """
            SELECT id, title, source, instructions, image_filename, image_original_name,
                   image_file_path, image_file_size, image_mime_type
            FROM pending_recipes
            WHERE id = :id
            """,
            {'id': pending_id},
        )
        if draft is None:
            raise NotFound(f"Pending recipe {pending_id} not found")
        title = (draft['title'] or '').strip()
        if not title:
            raise ValidationError("Pending recipe has no title")

        recipe_id = insert_recipe(
            tx, title, source=draft['source'], instructions=draft['instructions'],
        )
        copy_to_recipe(tx, 'pending', pending_id, recipe_id)
        promote_tags(tx, 'pending', pending_id, recipe_id)

        image_created = False
        if draft['image_filename'] and draft['image_file_path']:
            meta = ImageMeta(
                filename=draft['image_filename'],
                file_path=draft['image_file_path'],
                original_name=draft['image_original_name'] or 'recipe-image.jpg',
                file_size=draft['image_file_size'] or 0,
                mime_type=draft['image_mime_type'] or 'image/jpeg',
            )
            insert_image(tx, recipe_id, meta, is_hero=True, uploaded_by=admin_id)
            image_created = True

        result = tx.execute("DELETE FROM pending_recipes WHERE id = :id", {'id': pending_id})
        if result.rows_affected != 1:
            raise Conflict(NOT_FOUND_OR_REVIEWED)
        return ApprovalResult(recipe_id=recipe_id, image_created=image_created)

    approval = store.with_transaction(work)
    logger.info(
        "Admin %s approved pending recipe %s as recipe %s (image=%s)",
        admin_id, pending_id, approval.recipe_id, approval.image_created,
    )
    return approval


def delete_pending_draft(store, pending_id):
    """Discard a pending import and its downloaded image."""
    return pending.delete_pending(store, pending_id, remove_image=True)
