"""
Smoke tests for the recipe catalog.
Run with: python tests/smoke.py
"""

import sys
import os
import tempfile

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _temp_app(workdir):
    from app import create_app
    return create_app(
        'testing',
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{os.path.join(workdir, 'smoke.db')}",
        IMAGE_UPLOAD_FOLDER=os.path.join(workdir, 'images'),
    )


def test_app_imports():
    """Verify the app factory can be imported without errors."""
    from app import create_app, get_store
    from models import db
    assert callable(create_app)
    assert callable(get_store)
    assert db is not None
    print("OK: App imports successfully")


def test_models_import():
    """Verify models can be imported."""
    from models import Recipe, Ingredient, Tag, RecipeImage, PendingRecipe, UserSubmittedRecipe
    assert Recipe.__tablename__ == 'recipes'
    assert Ingredient.__tablename__ == 'ingredients'
    assert Tag is not None
    assert RecipeImage is not None
    assert PendingRecipe is not None
    assert UserSubmittedRecipe is not None
    print("OK: Models import successfully")


def test_security_utils_import():
    """Verify security utilities can be imported."""
    from utils import safe_fetch, is_safe_url, validate_and_process_image
    assert callable(safe_fetch)
    assert callable(is_safe_url)
    assert callable(validate_and_process_image)
    print("OK: Security utils import successfully")


def test_constants_import():
    """Verify constants can be imported."""
    from constants import MAX_PAGE_LIMIT, VALID_SUBMISSION_STATUSES, UNIT_MAPPINGS
    assert MAX_PAGE_LIMIT == 100
    assert VALID_SUBMISSION_STATUSES == {'pending', 'approved', 'rejected'}
    assert UNIT_MAPPINGS['cups'] == 'cup'
    print("OK: Constants import successfully")


def test_catalog_round_trip():
    """Verify a recipe can be created, read back and deleted."""
    from services import recipes
    with tempfile.TemporaryDirectory() as workdir:
        app = _temp_app(workdir)
        store = app.extensions['store']
        try:
            recipe = recipes.create(store, "Smoke Pie", ingredients=["apple"], tags=["Dessert"])
            assert recipes.get(store, recipe.id).tags == ["dessert"]
            assert recipes.delete(store, recipe.id)
        finally:
            store.dispose()
    print("OK: Catalog round trip works")


def test_error_responses():
    """Verify service errors become JSON responses."""
    from services import NotFound
    with tempfile.TemporaryDirectory() as workdir:
        app = _temp_app(workdir)

        @app.route('/missing')
        def missing():
            raise NotFound("Recipe 1 not found")

        try:
            with app.test_client() as client:
                response = client.get('/missing')
                assert response.status_code == 404
                assert response.get_json() == {'error': "Recipe 1 not found"}
        finally:
            app.extensions['store'].dispose()
    print("OK: Errors map to JSON responses")


if __name__ == '__main__':
    print("Running smoke tests...\n")

    tests = [
        test_app_imports,
        test_models_import,
        test_security_utils_import,
        test_constants_import,
        test_catalog_round_trip,
        test_error_responses,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except Exception as e:
            print(f"FAIL: {test.__name__} - {e}")
            failed += 1

    print(f"\n{'='*40}")
    if failed:
        print(f"FAILED: {failed}/{len(tests)} tests")
        sys.exit(1)
    else:
        print(f"PASSED: {len(tests)}/{len(tests)} tests")
        sys.exit(0)
