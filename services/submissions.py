"""
User Submissions

Recipes submitted by end users. A submission starts pending and is
approved or rejected exactly once (see moderation); while it is pending
its owner may still edit or withdraw it.
"""

import logging

from sqlalchemy import insert

from models import SubmissionDetail, SubmissionSummary, UserSubmittedRecipe, unix_now
from constants import MAX_LENGTHS, MAX_SUBMISSION_TAGS, STATUS_PENDING, VALID_SUBMISSION_STATUSES

from .drafts import clean_draft_tags, fetch_draft_tags, insert_draft_tags, replace_draft_tags
from .errors import NOT_FOUND_OR_REVIEWED, Conflict, NotFound, ValidationError
from .ingredients import coerce_ingredients, fetch_ingredients, insert_ingredients, replace_ingredients
from .validation import optional_positive_int, optional_text, page_bounds, require_text

logger = logging.getLogger(__name__)

DEFAULT_SUBMISSION_LIMIT = 20

SUMMARY_COLUMNS = """
    id, user_id, title, source, status, admin_notes, reviewed_by,
    reviewed_at, created_at, updated_at
"""
DETAIL_COLUMNS = SUMMARY_COLUMNS + ", instructions, servings"


def _collect(errors, check, *args):
    try:
        return check(*args)
    except ValidationError as e:
        errors.extend(e.errors or [e.message])
        return None


def validate_submission(draft, partial=False):
    """
    Check a DraftInput/DraftUpdate and return the cleaned column values.

    With partial=True, fields left as None are skipped (update semantics).

    Raises:
        ValidationError: With every problem found listed in errors
    """
    errors = []
    values = {}

    if not partial or draft.title is not None:
        values['title'] = _collect(errors, require_text, draft.title, 'Title', MAX_LENGTHS['title'])
    if not partial or draft.source is not None:
        values['source'] = _collect(errors, optional_text, draft.source, 'Source', MAX_LENGTHS['source'])
    if not partial or draft.instructions is not None:
        values['instructions'] = draft.instructions
    if not partial or draft.servings is not None:
        values['servings'] = _collect(errors, optional_positive_int, draft.servings, 'Servings')

    ingredient_list = None
    if not partial or draft.ingredients is not None:
        ingredient_list = _collect(errors, coerce_ingredients, draft.ingredients or [])

    tag_names = None
    if not partial or draft.tags is not None:
        tag_names = _collect(errors, clean_draft_tags, draft.tags or [])
        if tag_names is not None and len(tag_names) > MAX_SUBMISSION_TAGS:
            errors.append(f"Maximum {MAX_SUBMISSION_TAGS} tags allowed")

    if errors:
        raise ValidationError("Validation failed", errors=errors)
    return values, ingredient_list, tag_names


# ============================================
# CREATE
# ============================================

def submit(store, user_id, draft):
    """
    Store a user's recipe submission as pending.

    Returns:
        New submission id
    """
    if user_id is None:
        raise ValidationError("User is required")
    values, ingredient_list, tag_names = validate_submission(draft)

    now = unix_now()
    values.update({
        'user_id': user_id,
        'status': STATUS_PENDING,
        'created_at': now,
        'updated_at': now,
    })

    def work(tx):
        submission_id = tx.execute(insert(UserSubmittedRecipe.__table__), values).generated_id
        insert_ingredients(tx, 'submission', submission_id, ingredient_list)
        insert_draft_tags(tx, 'submission', submission_id, tag_names)
        return submission_id

    submission_id = store.with_transaction(work)
    logger.info("User %s submitted recipe %s", user_id, submission_id)
    return submission_id


# ============================================
# READ
# ============================================

def load_submission(runner, submission_id):
    row = runner.fetch_one(
        f"SELECT {DETAIL_COLUMNS} FROM user_submitted_recipes WHERE id = :id",
        {'id': submission_id},
    )
    if row is None:
        return None
    return SubmissionDetail.from_row(
        row,
        ingredients=fetch_ingredients(runner, 'submission', submission_id),
        tags=fetch_draft_tags(runner, 'submission', submission_id),
    )


def get_submission(store, submission_id):
    return store.read(lambda tx: load_submission(tx, submission_id))


def _check_status(status):
    if status is not None and status not in VALID_SUBMISSION_STATUSES:
        raise ValidationError(
            f"Status must be one of: {', '.join(sorted(VALID_SUBMISSION_STATUSES))}"
        )


def _page(store, where, params, order, limit, offset):
    limit, offset = page_bounds(limit, offset, DEFAULT_SUBMISSION_LIMIT)
    where_sql = f"WHERE {where}" if where else ""
    rows = store.fetch_all(
        f"""
        SELECT {SUMMARY_COLUMNS}
        FROM user_submitted_recipes
        {where_sql}
        ORDER BY {order}
        LIMIT :limit OFFSET :offset
        """,
        dict(params, limit=limit, offset=offset),
    )
    total = store.fetch_one(
        f"SELECT COUNT(*) AS count FROM user_submitted_recipes {where_sql}",
        params,
    )['count']
    return [SubmissionSummary.from_row(row) for row in rows], total


def list_by_user(store, user_id, limit=DEFAULT_SUBMISSION_LIMIT, offset=0, status=None):
    """A user's own submissions, newest first. Returns (list, total)."""
    _check_status(status)
    where = "user_id = :user_id"
    params = {'user_id': user_id}
    if status is not None:
        where += " AND status = :status"
        params['status'] = status
    return _page(store, where, params, "created_at DESC, id DESC", limit, offset)


def list_pending_submissions(store, limit=DEFAULT_SUBMISSION_LIMIT, offset=0):
    """Review queue, oldest first. Returns (list, total)."""
    return _page(
        store, "status = :status", {'status': STATUS_PENDING},
        "created_at ASC, id ASC", limit, offset,
    )


def list_submissions(store, limit=DEFAULT_SUBMISSION_LIMIT, offset=0, status=None):
    """All submissions, newest first, optionally filtered by status. Returns (list, total)."""
    _check_status(status)
    if status is None:
        return _page(store, "", {}, "created_at DESC, id DESC", limit, offset)
    return _page(store, "status = :status", {'status': status}, "created_at DESC, id DESC", limit, offset)


def pending_count(store):
    row = store.fetch_one(
        "SELECT COUNT(*) AS count FROM user_submitted_recipes WHERE status = :status",
        {'status': STATUS_PENDING},
    )
    return row['count']


def raise_missing_or_reviewed(tx, submission_id):
    """Raise NotFound or Conflict after a guarded write touched no rows."""
    exists = tx.fetch_one(
        "SELECT id FROM user_submitted_recipes WHERE id = :id",
        {'id': submission_id},
    )
    if exists is None:
        raise NotFound(NOT_FOUND_OR_REVIEWED)
    raise Conflict(NOT_FOUND_OR_REVIEWED)


# ============================================
# UPDATE
# ============================================

def update_submission(store, submission_id, changes, owner_id=None):
    """
    Edit a submission while it is still pending.

    Args:
        changes: DraftUpdate (None fields untouched, [] clears a list)
        owner_id: When given, the submission must belong to this user

    Raises:
        NotFound: If the submission does not exist (or is not the owner's)
        Conflict: If it has already been reviewed
    """
    values, ingredient_list, tag_names = validate_submission(changes, partial=True)
    values['updated_at'] = unix_now()

    def work(tx):
        conditions = "id = :id AND status = :status"
        params = {'id': submission_id, 'status': STATUS_PENDING}
        if owner_id is not None:
            conditions += " AND user_id = :owner_id"
            params['owner_id'] = owner_id

        # Claim the row first so a concurrent review cannot interleave
        assignments = ', '.join(f"{column} = :{column}" for column in values)
        result = tx.execute(
            f"UPDATE user_submitted_recipes SET {assignments} WHERE {conditions}",
            dict(params, **values),
        )
        if result.rows_affected == 0:
            if owner_id is not None:
                owned = tx.fetch_one(
                    "SELECT id FROM user_submitted_recipes WHERE id = :id AND user_id = :owner_id",
                    {'id': submission_id, 'owner_id': owner_id},
                )
                if owned is None:
                    raise NotFound(NOT_FOUND_OR_REVIEWED)
            raise_missing_or_reviewed(tx, submission_id)

        if ingredient_list is not None:
            replace_ingredients(tx, 'submission', submission_id, ingredient_list)
        if tag_names is not None:
            replace_draft_tags(tx, 'submission', submission_id, tag_names)
        return load_submission(tx, submission_id)

    return store.with_transaction(work)
