"""
Write Inputs

Typed inputs accepted by the service layer. Update records use None for
"leave untouched"; for ingredients and tags an empty list means "clear".
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class IngredientInput:
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None

    @classmethod
    def coerce(cls, value):
        """Accept an IngredientInput, a mapping, or a bare ingredient name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            quantity = value.get('quantity')
            return cls(
                name=value.get('name') or '',
                quantity=str(quantity) if quantity not in (None, '') else None,
                unit=value.get('unit') or None,
            )
        if isinstance(value, str):
            return cls(name=value)
        raise TypeError(f"Unsupported ingredient value: {value!r}")


@dataclass
class RecipeUpdate:
    title: Optional[str] = None
    source: Optional[str] = None
    instructions: Optional[str] = None
    servings: Optional[int] = None
    image_path: Optional[str] = None
    ingredients: Optional[List[IngredientInput]] = None
    tags: Optional[List[str]] = None


@dataclass
class DraftInput:
    """Recipe draft as produced by an import parse or a user submission form."""
    title: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    servings: Optional[int] = None
    ingredients: List[IngredientInput] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass
class DraftUpdate:
    title: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    servings: Optional[int] = None
    ingredients: Optional[List[IngredientInput]] = None
    tags: Optional[List[str]] = None


@dataclass
class ImageMeta:
    """Metadata of an image file already written to disk."""
    filename: str
    file_path: str
    original_name: Optional[str] = None
    file_size: int = 0
    mime_type: Optional[str] = 'image/jpeg'


@dataclass
class FileMeta:
    """Metadata of an uploaded source document (PDF) already on disk."""
    filename: str
    file_path: str
    original_name: Optional[str] = None
    file_size: int = 0
    mime_type: str = 'application/pdf'
