"""
Pending Import Models

Contains the uploaded-file provenance record and the PendingRecipe draft
(with its ingredients and raw tag strings) produced by PDF/URL imports.
"""

from .base import db, unix_now


class UploadedFile(db.Model):
    """Source document (PDF or URL reference) that a pending recipe came from."""
    __tablename__ = 'uploaded_files'

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer, nullable=False, default=0)
    mime_type = db.Column(db.String(100), nullable=False)
    uploaded_by = db.Column(db.Integer, nullable=False, index=True)
    uploaded_at = db.Column(db.Integer, nullable=False, default=unix_now)
    processed = db.Column(db.Boolean, nullable=False, default=False)


class PendingRecipe(db.Model):
    """AI-parsed draft awaiting admin approval. Has no review status column."""
    __tablename__ = 'pending_recipes'

    id = db.Column(db.Integer, primary_key=True)
    file_id = db.Column(db.Integer, db.ForeignKey('uploaded_files.id', ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(500))
    source = db.Column(db.String(500))
    category = db.Column(db.String(255))
    description = db.Column(db.Text)
    instructions = db.Column(db.Text)
    raw_text = db.Column(db.Text)
    parsed_data = db.Column(db.Text)  # JSON blob from the AI parse
    # Optional image downloaded during a URL import
    image_filename = db.Column(db.String(255))
    image_original_name = db.Column(db.String(255))
    image_file_path = db.Column(db.String(500))
    image_file_size = db.Column(db.Integer)
    image_mime_type = db.Column(db.String(100))
    created_at = db.Column(db.Integer, nullable=False, default=unix_now)


class PendingIngredient(db.Model):
    """Ingredient line of a pending recipe."""
    __tablename__ = 'pending_ingredients'

    id = db.Column(db.Integer, primary_key=True)
    pending_recipe_id = db.Column(db.Integer, db.ForeignKey('pending_recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.String(50))
    unit = db.Column(db.String(50))
    position = db.Column(db.Integer, nullable=False)


class PendingTag(db.Model):
    """Tag string of a pending recipe, stored verbatim until promotion."""
    __tablename__ = 'pending_tags'

    id = db.Column(db.Integer, primary_key=True)
    pending_recipe_id = db.Column(db.Integer, db.ForeignKey('pending_recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    tag_name = db.Column(db.String(100), nullable=False)
