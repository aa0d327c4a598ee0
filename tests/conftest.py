# tests/conftest.py
import io

import pytest
from PIL import Image

from app import create_app
from models import DraftInput, FileMeta
from services import files, pending, recipes
from services.images import store_upload


@pytest.fixture
def app(tmp_path):
    db_path = tmp_path / "recipes.db"
    application = create_app(
        'testing',
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{db_path}",
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
        IMAGE_UPLOAD_FOLDER=str(tmp_path / "uploads" / "images"),
    )
    yield application
    application.extensions['store'].dispose()


@pytest.fixture
def store(app):
    return app.extensions['store']


@pytest.fixture
def image_dir(app):
    return app.config['IMAGE_UPLOAD_FOLDER']


def png_bytes(color=(200, 30, 30), size=(32, 24)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, 'PNG')
    return buffer.getvalue()


@pytest.fixture
def make_recipe(store):
    def _make(title="Pie", ingredients=None, tags=None, **kwargs):
        if ingredients is None:
            ingredients = [{'name': 'apple', 'quantity': '3', 'unit': 'whole'}]
        return recipes.create(store, title, ingredients=ingredients, tags=tags or [], **kwargs)
    return _make


@pytest.fixture
def make_image(image_dir):
    """Write a small real JPEG under image_dir and return its ImageMeta."""
    def _make(name="photo.png", color=(200, 30, 30)):
        return store_upload(png_bytes(color), image_dir, original_name=name)
    return _make


@pytest.fixture
def make_pending(store, tmp_path):
    def _make(title="Grandma's Stew", ingredients=None, tags=None, image=None, uploaded_by=1):
        file_id = files.create_file(
            store,
            filename="stew.pdf",
            original_name="Stew.pdf",
            file_path=str(tmp_path / "stew.pdf"),
            file_size=1234,
            mime_type="application/pdf",
            uploaded_by=uploaded_by,
        )
        draft = DraftInput(
            title=title,
            source="Grandma",
            instructions="Simmer.",
            ingredients=ingredients if ingredients is not None else [
                {'name': 'beef', 'quantity': '2', 'unit': 'lb'},
                {'name': 'carrot', 'quantity': '3'},
            ],
            tags=tags if tags is not None else ['Dinner'],
        )
        return pending.create_pending(store, file_id, draft, raw_text="raw", parsed_data={'title': title}, image=image)
    return _make


@pytest.fixture
def pdf_meta(tmp_path):
    path = tmp_path / "upload.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    return FileMeta(filename="upload.pdf", file_path=str(path), original_name="Cookies.pdf", file_size=13)



@pytest.fixture
def image_bytes():
    return png_bytes
