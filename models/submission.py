"""
User Submission Models

Contains UserSubmittedRecipe (end-user drafts with a review status) and
its ingredient and tag rows.
"""

from .base import db, unix_now


class UserSubmittedRecipe(db.Model):
    """End-user recipe draft. status moves pending -> approved | rejected only."""
    __tablename__ = 'user_submitted_recipes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    source = db.Column(db.String(255))
    instructions = db.Column(db.Text)
    servings = db.Column(db.Integer)
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)
    admin_notes = db.Column(db.Text)
    reviewed_by = db.Column(db.Integer)
    reviewed_at = db.Column(db.Integer)
    created_at = db.Column(db.Integer, nullable=False, default=unix_now)
    updated_at = db.Column(db.Integer, nullable=False, default=unix_now)


class SubmittedIngredient(db.Model):
    """Ingredient line of a user submission."""
    __tablename__ = 'user_submitted_ingredients'

    id = db.Column(db.Integer, primary_key=True)
    submitted_recipe_id = db.Column(db.Integer, db.ForeignKey('user_submitted_recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.String(50))
    unit = db.Column(db.String(50))
    position = db.Column(db.Integer, nullable=False)


class SubmittedTag(db.Model):
    """Tag string of a user submission, stored verbatim until promotion."""
    __tablename__ = 'user_submitted_tags'

    id = db.Column(db.Integer, primary_key=True)
    submitted_recipe_id = db.Column(db.Integer, db.ForeignKey('user_submitted_recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    tag_name = db.Column(db.String(100), nullable=False)


class SavedRecipe(db.Model):
    """Per-user bookmark on a canonical recipe."""
    __tablename__ = 'user_saved_recipes'
    __table_args__ = (db.UniqueConstraint('user_id', 'recipe_id', name='uq_saved_user_recipe'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    saved_at = db.Column(db.Integer, nullable=False, default=unix_now)
