"""
Image Validation and Processing Module

Validates uploaded and downloaded recipe images before they are stored.
Every accepted image is decoded and re-encoded through Pillow as JPEG,
which drops metadata and anything appended to the original file.
"""

import os
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from constants import MAX_IMAGE_SIZE


class ImageValidationError(Exception):
    """Raised when an image fails validation."""
    pass


# Allowed image formats (Pillow format names)
ALLOWED_FORMATS = {'JPEG', 'PNG', 'GIF', 'WEBP'}

# Source images larger than this are refused outright (decompression bombs)
MAX_WIDTH = 4096
MAX_HEIGHT = 4096


def _read_bytes(image_data):
    if isinstance(image_data, (bytes, bytearray)):
        return bytes(image_data)
    # File-like (werkzeug FileStorage, open file, BytesIO)
    if hasattr(image_data, 'seek'):
        image_data.seek(0)
    return image_data.read()


def _flatten(img):
    """Composite transparent images onto white so they can be saved as JPEG."""
    if img.mode == 'P':
        img = img.convert('RGBA')
    if img.mode in ('RGBA', 'LA'):
        background = Image.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def validate_and_process_image(image_data, output_path, max_width=2048, max_height=2048):
    """
    Validate an image and write a re-encoded JPEG copy.

    Args:
        image_data: Raw image bytes or a file-like object
        output_path: Target path; the extension is forced to .jpg
        max_width: Images wider than this are scaled down
        max_height: Images taller than this are scaled down

    Returns:
        str: The path actually written

    Raises:
        ImageValidationError: If the data is not an acceptable image
    """
    content = _read_bytes(image_data)
    if not content:
        raise ImageValidationError("Image is empty")
    if len(content) > MAX_IMAGE_SIZE:
        raise ImageValidationError(f"Image too large: {len(content)} bytes (max {MAX_IMAGE_SIZE})")

    try:
        img = Image.open(BytesIO(content))
        img.verify()

        # verify() leaves the image unusable, so open it again
        img = Image.open(BytesIO(content))
        if img.format not in ALLOWED_FORMATS:
            raise ImageValidationError(
                f"Invalid image format: {img.format}. "
                f"Allowed formats: {', '.join(sorted(ALLOWED_FORMATS))}"
            )

        width, height = img.size
        if width > MAX_WIDTH or height > MAX_HEIGHT:
            raise ImageValidationError(
                f"Image dimensions too large: {width}x{height}. "
                f"Maximum: {MAX_WIDTH}x{MAX_HEIGHT}"
            )

        if width > max_width or height > max_height:
            img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

        img = _flatten(img)
        output_path = os.path.splitext(output_path)[0] + '.jpg'
        img.save(output_path, 'JPEG', quality=85, optimize=True)
        return output_path

    except Image.DecompressionBombError:
        raise ImageValidationError("Image appears to be a decompression bomb (too large when decoded)")
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageValidationError(f"Invalid or corrupted image: {e}")
