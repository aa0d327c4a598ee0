"""
Recipe Ingestion

Turns PDFs and web pages into pending recipes. Text extraction, AI parsing
and page scraping are supplied by the caller as plain callables:

    extract_text(path) -> str
    parse_recipe(text) -> dict
    scrape_page(url) -> {'type': 'structured' | 'unstructured', 'data': ...,
                         'source': url, 'hostname': host}
    parse_page(page_data, url) -> dict

All network and parsing work finishes before the draft transaction opens.
"""

import json
import logging
import os

import requests

from models import DraftInput, IngredientInput, unix_now
from constants import MIN_EXTRACTED_TEXT
from utils.image_handler import ImageValidationError
from utils.url_validator import SSRFError, is_safe_url, safe_fetch

from . import files, pending
from .errors import ValidationError
from .images import remove_files, store_upload
from .parsing import clean_text, safe_int, split_ingredient_line

logger = logging.getLogger(__name__)

URL_MIME_TYPE = 'text/x-url'


# ============================================
# PARSE OUTPUT -> DRAFT
# ============================================

def _coerce_ingredient(entry):
    if isinstance(entry, str):
        quantity, unit, name = split_ingredient_line(entry)
        if not name:
            return None
        return IngredientInput(name=name, quantity=quantity, unit=unit)
    if isinstance(entry, dict):
        ingredient = IngredientInput.coerce(entry)
        if not (ingredient.name or '').strip():
            return None
        return ingredient
    return None


def _coerce_tags(value):
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        return []
    return [tag for tag in value if isinstance(tag, str) and tag.strip()]


def _coerce_instructions(value):
    # Parsers sometimes return numbered steps as a list
    if isinstance(value, (list, tuple)):
        steps = [str(step).strip() for step in value if str(step).strip()]
        return '\n'.join(steps) or None
    return clean_text(value)


def coerce_draft(parsed):
    """
    Map a parser result onto a DraftInput.

    Ingredient entries may be dicts ({name, quantity, unit}) or bare lines
    like "2 cups flour"; entries without a name are dropped.
    """
    if not isinstance(parsed, dict):
        raise ValidationError("Parser returned no recipe data")

    ingredients = []
    for entry in parsed.get('ingredients') or []:
        ingredient = _coerce_ingredient(entry)
        if ingredient is not None:
            ingredients.append(ingredient)

    servings = safe_int(parsed.get('servings'), min_val=1)
    return DraftInput(
        title=clean_text(parsed.get('title')),
        source=clean_text(parsed.get('source')),
        category=clean_text(parsed.get('category')),
        description=clean_text(parsed.get('description')),
        instructions=_coerce_instructions(parsed.get('instructions')),
        servings=servings,
        ingredients=ingredients,
        tags=_coerce_tags(parsed.get('tags')),
    )


# ============================================
# PDF IMPORT
# ============================================

def import_pdf(store, file_meta, uploaded_by, extract_text, parse_recipe):
    """
    Record an uploaded PDF, parse it, and store the result as a pending recipe.

    The file row is kept even when extraction or parsing fails; it just
    stays unprocessed.

    Args:
        file_meta: FileMeta of the PDF already saved to disk
        uploaded_by: Admin user id

    Returns:
        New pending recipe id

    Raises:
        ValidationError: If too little text could be extracted
    """
    file_id = files.create_file(
        store,
        filename=file_meta.filename,
        original_name=file_meta.original_name,
        file_path=file_meta.file_path,
        file_size=file_meta.file_size,
        mime_type=file_meta.mime_type,
        uploaded_by=uploaded_by,
    )

    raw_text = extract_text(file_meta.file_path) or ''
    if len(raw_text.strip()) < MIN_EXTRACTED_TEXT:
        raise ValidationError(
            "Could not extract text from this PDF. It may be image-based or scanned."
        )
    if len(raw_text.strip()) < 50:
        logger.warning(
            "PDF text extraction yielded very short text (%d chars) for %s",
            len(raw_text), file_meta.original_name or file_meta.filename,
        )

    parsed = parse_recipe(raw_text)
    draft = coerce_draft(parsed)

    def work(tx):
        pending_id = pending.insert_pending(tx, file_id, draft, raw_text=raw_text, parsed_data=parsed)
        files.set_processed(tx, file_id)
        return pending_id

    pending_id = store.with_transaction(work)
    logger.info("Imported PDF %s as pending recipe %s", file_meta.filename, pending_id)
    return pending_id


# ============================================
# URL IMPORT
# ============================================

def download_image(image_url, image_dir, fetch=safe_fetch):
    """
    Fetch and store a recipe image. Returns ImageMeta, or None when the image
    cannot be used; a missing image never fails the import.
    """
    try:
        response = fetch(image_url)
        name = os.path.basename(image_url.split('?', 1)[0]) or 'recipe-image.jpg'
        return store_upload(response.content, image_dir, original_name=name, prefix='url-import')
    except (SSRFError, ImageValidationError, requests.RequestException, OSError) as e:
        logger.warning("Discarded recipe image %s: %s", image_url, e)
        return None


def _page_to_recipe(scraped, url, parse_page):
    if scraped.get('type') == 'structured':
        parsed = dict(scraped.get('data') or {})
        raw_text = json.dumps(parsed, indent=2)
    else:
        data = scraped.get('data') or {}
        raw_text = (
            f"URL: {scraped.get('source') or url}\n"
            f"Title: {data.get('title') or ''}\n\n"
            f"{data.get('content') or ''}"
        )
        parsed = parse_page(data, scraped.get('source') or url)
    if not isinstance(parsed, dict):
        raise ValidationError("Parser returned no recipe data")
    if not parsed.get('source'):
        parsed['source'] = scraped.get('hostname')
    return parsed, raw_text


def import_url(store, url, uploaded_by, scrape_page, parse_page, image_dir, fetch=safe_fetch):
    """
    Scrape a recipe page and store it as a pending recipe.

    The page's image, if any, is downloaded first; it is deleted again when
    the draft cannot be stored.

    Returns:
        New pending recipe id

    Raises:
        ValidationError: If the URL is missing or unsafe to fetch
    """
    url = (url or '').strip()
    if not url:
        raise ValidationError("URL is required")
    safe, error = is_safe_url(url)
    if not safe:
        raise ValidationError(f"URL not allowed: {error}")

    scraped = scrape_page(url)
    parsed, raw_text = _page_to_recipe(scraped, url, parse_page)
    draft = coerce_draft(parsed)

    image = None
    if parsed.get('image'):
        image = download_image(parsed['image'], image_dir, fetch=fetch)

    def work(tx):
        file_id = files.insert_file(
            tx,
            filename=f"url-import-{unix_now()}.txt",
            original_name=url,
            file_path=url,
            file_size=len(raw_text),
            mime_type=URL_MIME_TYPE,
            uploaded_by=uploaded_by,
        )
        pending_id = pending.insert_pending(
            tx, file_id, draft, raw_text=raw_text, parsed_data=parsed, image=image,
        )
        files.set_processed(tx, file_id)
        return pending_id

    try:
        pending_id = store.with_transaction(work)
    except Exception:
        if image is not None:
            remove_files([image.file_path])
        raise

    logger.info("Imported %s as pending recipe %s (image=%s)", url, pending_id, image is not None)
    return pending_id
