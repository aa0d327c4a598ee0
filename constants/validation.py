"""
Validation Constants

Contains whitelist values and limits for validating recipe, draft and
review input before it reaches the database.
"""

# Review states for user submissions (pending is the only non-terminal one)
STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'
VALID_SUBMISSION_STATUSES = {STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED}

# Valid calorie estimate confidence levels
VALID_CALORIE_CONFIDENCE = {'low', 'medium', 'high'}

# Columns the admin recipe list may be sorted by (whitelist for security)
ADMIN_SORT_COLUMNS = {'title', 'date_added', 'estimated_calories', 'times_cooked'}
VALID_SORT_ORDERS = {'ASC', 'DESC'}

# Pagination bounds
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

# Maximum number of tags on a user submission
MAX_SUBMISSION_TAGS = 10

# Minimum characters of extracted text for an import to be worth parsing
MIN_EXTRACTED_TEXT = 10

# Maximum field lengths for security
MAX_LENGTHS = {
    'title': 255,
    'source': 255,
    'ingredient_name': 255,
    'quantity': 50,
    'unit': 50,
    'tag_name': 100,
    'pending_title': 500,
}
