"""
Models Package

Exports all database models, the db instance, and the typed read/write
records used throughout the application.
"""

from .base import db, unix_now

from .recipe import Recipe, Ingredient, Tag, RecipeImage, recipe_tags
from .pending import UploadedFile, PendingRecipe, PendingIngredient, PendingTag
from .submission import UserSubmittedRecipe, SubmittedIngredient, SubmittedTag, SavedRecipe
from .inputs import IngredientInput, RecipeUpdate, DraftInput, DraftUpdate, ImageMeta, FileMeta
from .projections import (
    IngredientView, RecipeImageView, RecipeSummary, RecipeDetail, AdminRecipeRow,
    DashboardStats, PendingRecipeSummary, PendingRecipeDetail, SubmissionSummary,
    SubmissionDetail, ApprovalResult, UploadedFileView,
)

__all__ = [
    'db',
    'unix_now',
    # Tables
    'Recipe',
    'Ingredient',
    'Tag',
    'RecipeImage',
    'recipe_tags',
    'UploadedFile',
    'PendingRecipe',
    'PendingIngredient',
    'PendingTag',
    'UserSubmittedRecipe',
    'SubmittedIngredient',
    'SubmittedTag',
    'SavedRecipe',
    # Inputs
    'IngredientInput',
    'RecipeUpdate',
    'DraftInput',
    'DraftUpdate',
    'ImageMeta',
    'FileMeta',
    # Projections
    'IngredientView',
    'RecipeImageView',
    'RecipeSummary',
    'RecipeDetail',
    'AdminRecipeRow',
    'DashboardStats',
    'PendingRecipeSummary',
    'PendingRecipeDetail',
    'SubmissionSummary',
    'SubmissionDetail',
    'ApprovalResult',
    'UploadedFileView',
]
