# Shared constants for the recipe catalog
from .validation import (
    STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED, VALID_SUBMISSION_STATUSES,
    VALID_CALORIE_CONFIDENCE, ADMIN_SORT_COLUMNS, VALID_SORT_ORDERS,
    DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, MAX_SUBMISSION_TAGS, MIN_EXTRACTED_TEXT,
    MAX_LENGTHS,
)
from .media import IMAGE_URL_PREFIX, MAX_IMAGE_SIZE
from .units import UNIT_MAPPINGS, UNICODE_FRACTIONS
