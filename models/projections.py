"""
Read Projections

Plain typed records returned by the service layer, one per read shape
(list view, detail view, admin view, draft views). Rows are mapped
explicitly column by column so an unexpected column never leaks through.
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional

from constants import IMAGE_URL_PREFIX


def image_url(filename):
    """Public URL for a stored image filename."""
    if not filename:
        return None
    return IMAGE_URL_PREFIX + filename


@dataclass
class IngredientView:
    name: str
    quantity: Optional[str]
    unit: Optional[str]
    position: int

    @classmethod
    def from_row(cls, row):
        return cls(
            name=row['name'],
            quantity=row['quantity'],
            unit=row['unit'],
            position=row['position'],
        )


@dataclass
class RecipeImageView:
    id: int
    recipe_id: int
    filename: str
    original_name: Optional[str]
    file_path: str
    file_size: int
    mime_type: Optional[str]
    is_hero: bool
    position: int
    uploaded_by: Optional[int]
    uploaded_at: int

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            recipe_id=row['recipe_id'],
            filename=row['filename'],
            original_name=row['original_name'],
            file_path=row['file_path'],
            file_size=row['file_size'],
            mime_type=row['mime_type'],
            is_hero=bool(row['is_hero']),
            position=row['position'],
            uploaded_by=row['uploaded_by'],
            uploaded_at=row['uploaded_at'],
        )

    @property
    def url(self):
        return image_url(self.filename)

    def public(self):
        """Image fields safe to hand to clients (no server paths)."""
        return {
            'id': self.id,
            'filename': self.filename,
            'original_name': self.original_name,
            'mime_type': self.mime_type,
            'is_hero': self.is_hero,
            'position': self.position,
            'url': self.url,
        }


@dataclass
class RecipeSummary:
    """List/search row: carries only the hero image filename, not the image set."""
    id: int
    title: str
    source: Optional[str]
    date_added: int
    image_path: Optional[str]
    hero_image_filename: Optional[str]
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row, tags=None):
        return cls(
            id=row['id'],
            title=row['title'],
            source=row['source'],
            date_added=row['date_added'],
            image_path=row['image_path'],
            hero_image_filename=row['hero_image_filename'],
            tags=list(tags or []),
        )

    @property
    def hero_image(self):
        return image_url(self.hero_image_filename)


@dataclass
class RecipeDetail:
    id: int
    title: str
    source: Optional[str]
    instructions: Optional[str]
    servings: Optional[int]
    image_path: Optional[str]
    estimated_calories: Optional[int]
    calories_confidence: Optional[str]
    times_cooked: int
    date_added: int
    created_at: int
    updated_at: int
    tags: List[str] = field(default_factory=list)
    ingredients: List[IngredientView] = field(default_factory=list)
    images: List[RecipeImageView] = field(default_factory=list)

    @classmethod
    def from_row(cls, row, tags, ingredients, images):
        return cls(
            id=row['id'],
            title=row['title'],
            source=row['source'],
            instructions=row['instructions'],
            servings=row['servings'],
            image_path=row['image_path'],
            estimated_calories=row['estimated_calories'],
            calories_confidence=row['calories_confidence'],
            times_cooked=row['times_cooked'],
            date_added=row['date_added'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
            tags=list(tags),
            ingredients=list(ingredients),
            images=list(images),
        )

    @property
    def hero_image(self):
        """
        Flagged hero image, else the first image by (is_hero desc, position asc),
        else the legacy image_path, else None.
        """
        for image in self.images:
            if image.is_hero:
                return image.url
        if self.images:
            ordered = sorted(self.images, key=lambda img: (not img.is_hero, img.position))
            return ordered[0].url
        return self.image_path or None


@dataclass
class AdminRecipeRow:
    """Admin table row. category and main_ingredient are derived, not stored."""
    id: int
    title: str
    date_added: int
    estimated_calories: Optional[int]
    times_cooked: int
    category: Optional[str]
    main_ingredient: Optional[str]

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            title=row['title'],
            date_added=row['date_added'],
            estimated_calories=row['estimated_calories'],
            times_cooked=row['times_cooked'],
            category=row['category'],
            main_ingredient=row['main_ingredient'],
        )


@dataclass
class DashboardStats:
    total_recipes: int
    pending_recipes: int
    pending_submissions: int
    categories_count: int
    recent_recipes: int
    avg_calories: int
    recipes_with_calories: int


def _decode_parsed_data(raw):
    # Invalid JSON is kept as the original string
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


@dataclass
class PendingRecipeSummary:
    id: int
    file_id: int
    title: Optional[str]
    source: Optional[str]
    category: Optional[str]
    description: Optional[str]
    original_name: Optional[str]
    has_image: bool
    created_at: int

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            file_id=row['file_id'],
            title=row['title'],
            source=row['source'],
            category=row['category'],
            description=row['description'],
            original_name=row['original_name'],
            has_image=bool(row['image_filename']),
            created_at=row['created_at'],
        )


@dataclass
class PendingRecipeDetail:
    id: int
    file_id: int
    title: Optional[str]
    source: Optional[str]
    category: Optional[str]
    description: Optional[str]
    instructions: Optional[str]
    raw_text: Optional[str]
    parsed_data: object
    original_name: Optional[str]
    image_filename: Optional[str]
    image_original_name: Optional[str]
    image_file_path: Optional[str]
    image_file_size: Optional[int]
    image_mime_type: Optional[str]
    created_at: int
    ingredients: List[IngredientView] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row, ingredients, tags):
        return cls(
            id=row['id'],
            file_id=row['file_id'],
            title=row['title'],
            source=row['source'],
            category=row['category'],
            description=row['description'],
            instructions=row['instructions'],
            raw_text=row['raw_text'],
            parsed_data=_decode_parsed_data(row['parsed_data']),
            original_name=row['original_name'],
            image_filename=row['image_filename'],
            image_original_name=row['image_original_name'],
            image_file_path=row['image_file_path'],
            image_file_size=row['image_file_size'],
            image_mime_type=row['image_mime_type'],
            created_at=row['created_at'],
            ingredients=list(ingredients),
            tags=list(tags),
        )

    @property
    def image_url(self):
        return image_url(self.image_filename)


@dataclass
class SubmissionSummary:
    id: int
    user_id: int
    title: str
    source: Optional[str]
    status: str
    admin_notes: Optional[str]
    reviewed_by: Optional[int]
    reviewed_at: Optional[int]
    created_at: int
    updated_at: int

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            title=row['title'],
            source=row['source'],
            status=row['status'],
            admin_notes=row['admin_notes'],
            reviewed_by=row['reviewed_by'],
            reviewed_at=row['reviewed_at'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )


@dataclass
class SubmissionDetail(SubmissionSummary):
    instructions: Optional[str] = None
    servings: Optional[int] = None
    ingredients: List[IngredientView] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row, ingredients=(), tags=()):
        summary = SubmissionSummary.from_row(row)
        return cls(
            **vars(summary),
            instructions=row['instructions'],
            servings=row['servings'],
            ingredients=list(ingredients),
            tags=list(tags),
        )


@dataclass
class ApprovalResult:
    recipe_id: int
    image_created: bool = False


@dataclass
class UploadedFileView:
    id: int
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    uploaded_by: int
    uploaded_at: int
    processed: bool

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row['id'],
            filename=row['filename'],
            original_name=row['original_name'],
            file_path=row['file_path'],
            file_size=row['file_size'],
            mime_type=row['mime_type'],
            uploaded_by=row['uploaded_by'],
            uploaded_at=row['uploaded_at'],
            processed=bool(row['processed']),
        )
