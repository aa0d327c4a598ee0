# Utility modules for the recipe catalog
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .image_handler import validate_and_process_image, ImageValidationError
