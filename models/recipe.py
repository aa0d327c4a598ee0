"""
Recipe Models

Contains the canonical Recipe aggregate tables: recipes, their ordered
ingredients, the shared tag vocabulary with its junction table, and the
per-recipe image set.
"""

from .base import db, unix_now


# Many-to-many junction between recipes and tags (no payload)
recipe_tags = db.Table(
    'recipe_tags',
    db.Column('recipe_id', db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), primary_key=True),
    db.Column('tag_id', db.Integer, db.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True, index=True),
)


class Recipe(db.Model):
    """Canonical, publicly visible recipe."""
    __tablename__ = 'recipes'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, index=True)
    source = db.Column(db.String(255))
    date_added = db.Column(db.Integer, nullable=False, default=unix_now, index=True)
    instructions = db.Column(db.Text)
    servings = db.Column(db.Integer)
    estimated_calories = db.Column(db.Integer)
    calories_confidence = db.Column(db.String(10))  # low / medium / high
    image_path = db.Column(db.String(255))  # legacy single-image field
    times_cooked = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.Integer, nullable=False, default=unix_now)
    updated_at = db.Column(db.Integer, nullable=False, default=unix_now)


class Ingredient(db.Model):
    """Ingredient line owned by one recipe; position gives display order."""
    __tablename__ = 'ingredients'

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    quantity = db.Column(db.String(50))  # kept as text so "1/2" survives
    unit = db.Column(db.String(50))
    position = db.Column(db.Integer, nullable=False)


class Tag(db.Model):
    """Deduplicated tag name, shared across recipes through recipe_tags."""
    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    created_at = db.Column(db.Integer, nullable=False, default=unix_now)


class RecipeImage(db.Model):
    """Uploaded image belonging to a recipe. At most one per recipe is the hero."""
    __tablename__ = 'recipe_images'

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255))
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer, nullable=False, default=0)
    mime_type = db.Column(db.String(100))
    is_hero = db.Column(db.Boolean, nullable=False, default=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    uploaded_by = db.Column(db.Integer)
    uploaded_at = db.Column(db.Integer, nullable=False, default=unix_now)
