"""
Services Package

Business logic for the recipe catalog: the transactional store, the recipe
aggregate with its tags and images, draft aggregates and moderation.
Aggregate modules are used as namespaces (recipes.create, images.add, ...).
"""

from .errors import RecipeError, ValidationError, NotFound, Conflict, StorageError
from .store import Store, Transaction, ExecuteResult

from . import (
    files,
    images,
    ingestion,
    moderation,
    pending,
    recipes,
    saved,
    submissions,
    tags,
)

__all__ = [
    # Errors
    'RecipeError',
    'ValidationError',
    'NotFound',
    'Conflict',
    'StorageError',
    # Store
    'Store',
    'Transaction',
    'ExecuteResult',
    # Aggregates
    'files',
    'images',
    'ingestion',
    'moderation',
    'pending',
    'recipes',
    'saved',
    'submissions',
    'tags',
]
