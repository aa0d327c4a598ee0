"""
Service Errors

Typed failures raised by the recipe catalog core. Each carries the HTTP
status a controller should answer with.
"""


class RecipeError(Exception):
    """Base class for every error the core raises on purpose."""
    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ValidationError(RecipeError):
    """Malformed or missing input. Always caller-fixable."""
    status_code = 400


class NotFound(RecipeError):
    """The referenced id does not exist."""
    status_code = 404


class Conflict(RecipeError):
    """The draft is already in a terminal review state."""
    status_code = 409


class StorageError(RecipeError):
    """Connection or transaction failure. The message never carries driver text."""
    status_code = 500

    def __init__(self, message='A storage error occurred'):
        super().__init__(message)


# Shared message so review history is not leaked to callers
NOT_FOUND_OR_REVIEWED = 'Submission not found or already reviewed'
