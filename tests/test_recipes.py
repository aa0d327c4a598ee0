# tests/test_recipes.py
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

import pytest

from models import IngredientInput, RecipeUpdate
from services import NotFound, StorageError, ValidationError, images, ingredients, recipes


def _count(store, table):
    return store.fetch_one(f"SELECT COUNT(*) AS count FROM {table}")['count']


def test_pie_scenario(store):
    recipe = recipes.create(
        store,
        "Pie",
        ingredients=[{'name': 'apple', 'quantity': '3', 'unit': 'whole'}],
        tags=["dessert"],
    )

    loaded = recipes.get(store, recipe.id)
    assert loaded.title == "Pie"
    assert len(loaded.ingredients) == 1
    assert loaded.ingredients[0].name == "apple"
    assert loaded.ingredients[0].quantity == "3"
    assert loaded.ingredients[0].unit == "whole"
    assert loaded.ingredients[0].position == 0
    assert loaded.tags == ["dessert"]
    assert loaded.images == []
    assert loaded.hero_image is None


def test_create_keeps_ingredient_order_and_fraction_text(store):
    recipe = recipes.create(
        store,
        "Bread",
        ingredients=[
            IngredientInput(name="flour", quantity="2 1/2", unit="cup"),
            "salt",
            {'name': ' yeast ', 'quantity': 1, 'unit': 'tsp'},
        ],
    )
    assert [(i.name, i.quantity, i.position) for i in recipe.ingredients] == [
        ("flour", "2 1/2", 0),
        ("salt", None, 1),
        ("yeast", "1", 2),
    ]


def test_create_dedupes_tags_case_insensitively(store):
    recipe = recipes.create(store, "Cake", tags=["Dessert", "dessert", "DESSERT"])

    assert recipe.tags == ["dessert"]
    assert store.fetch_all("SELECT name FROM tags") == [{'name': 'dessert'}]
    assert _count(store, "recipe_tags") == 1


@pytest.mark.parametrize("kwargs", [
    {'title': "   "},
    {'title': "Soup", 'ingredients': "salt"},
    {'title': "Soup", 'ingredients': [{'quantity': '1'}]},
    {'title': "Soup", 'tags': "dinner"},
    {'title': "Soup", 'servings': 0},
])
def test_create_rejects_invalid_input(store, kwargs):
    with pytest.raises(ValidationError):
        recipes.create(store, **kwargs)
    assert _count(store, "recipes") == 0


def test_create_is_atomic_when_an_ingredient_insert_fails(store, monkeypatch):
    original = ingredients.insert_ingredients

    def failing_insert(tx, kind, owner_id, items):
        # First ingredient goes in, second hits a NOT NULL violation
        original(tx, kind, owner_id, items[:1])
        tx.execute(
            "INSERT INTO ingredients (recipe_id, name, position) VALUES (:rid, NULL, 1)",
            {'rid': owner_id},
        )

    monkeypatch.setattr(recipes, "insert_ingredients", failing_insert)

    with pytest.raises(StorageError):
        recipes.create(store, "Broken", ingredients=["egg", "milk"], tags=["breakfast"])

    assert _count(store, "recipes") == 0
    assert _count(store, "ingredients") == 0
    assert _count(store, "tags") == 0


def test_get_missing_recipe_returns_none(store):
    assert recipes.get(store, 12345) is None


def test_list_recipes_newest_first_with_clamped_limit(store, make_recipe):
    first = make_recipe(title="First", tags=["b", "a"])
    second = make_recipe(title="Second")
    store.execute("UPDATE recipes SET date_added = 100 WHERE id = :id", {'id': first.id})
    store.execute("UPDATE recipes SET date_added = 200 WHERE id = :id", {'id': second.id})

    rows, total = recipes.list_recipes(store, limit=0, offset=-5)
    assert total == 2
    assert [r.title for r in rows] == ["Second"]

    rows, _ = recipes.list_recipes(store, limit=500)
    assert [r.title for r in rows] == ["Second", "First"]
    assert rows[1].tags == ["a", "b"]
    assert rows[1].hero_image is None


def test_list_recipes_carries_hero_image_filename(store, make_recipe, make_image):
    recipe = make_recipe()
    images.add(store, recipe.id, make_image("a.png"))
    hero = images.add(store, recipe.id, make_image("b.png"), is_hero=True)

    rows, _ = recipes.list_recipes(store)
    assert rows[0].hero_image_filename == hero.filename
    assert rows[0].hero_image == f"/uploads/images/{hero.filename}"


def test_search_requires_a_parameter(store):
    with pytest.raises(ValidationError):
        recipes.search(store)
    with pytest.raises(ValidationError):
        recipes.search(store, title="   ", ingredients=[], tags=[])


def test_search_filters(store, make_recipe):
    make_recipe(title="Apple Pie", ingredients=["Apple", "Butter", "Flour"], tags=["Dessert"])
    make_recipe(title="Apple Salad", ingredients=["apple", "lettuce"], tags=["salad"])
    make_recipe(title="Beef Stew", ingredients=["beef", "carrot"], tags=["dinner"])

    assert {r.title for r in recipes.search(store, title="apple")} == {"Apple Pie", "Apple Salad"}
    assert {r.title for r in recipes.search(store, ingredient="LETT")} == {"Apple Salad"}
    assert {r.title for r in recipes.search(store, ingredients=[" APPLE ", "butter"])} == {"Apple Pie"}
    assert recipes.search(store, ingredients=["apple", "beef"]) == []
    assert {r.title for r in recipes.search(store, tags=["salad", "DINNER"])} == {"Apple Salad", "Beef Stew"}
    assert {r.title for r in recipes.search(store, title="apple", tags=["dessert"])} == {"Apple Pie"}


def test_update_touches_only_supplied_fields(store, make_recipe):
    recipe = make_recipe(title="Pie", source="Mom", tags=["dessert"])

    updated = recipes.update(store, recipe.id, RecipeUpdate(instructions="Bake at 350."))

    assert updated.title == "Pie"
    assert updated.source == "Mom"
    assert updated.instructions == "Bake at 350."
    assert updated.tags == ["dessert"]
    assert [i.name for i in updated.ingredients] == ["apple"]


def test_update_replaces_lists_and_empty_list_clears(store, make_recipe):
    recipe = make_recipe(tags=["dessert"])

    updated = recipes.update(store, recipe.id, RecipeUpdate(
        ingredients=[{'name': 'pear'}, {'name': 'sugar', 'quantity': '1/2', 'unit': 'cup'}],
    ))
    assert [(i.name, i.position) for i in updated.ingredients] == [("pear", 0), ("sugar", 1)]

    cleared = recipes.update(store, recipe.id, RecipeUpdate(ingredients=[], tags=[]))
    assert cleared.ingredients == []
    assert cleared.tags == []
    # "dessert" lost its only recipe
    assert _count(store, "tags") == 0


def test_update_tags_twice_is_idempotent(store, make_recipe):
    recipe = make_recipe(tags=[])

    recipes.update(store, recipe.id, RecipeUpdate(tags=["a", "b"]))
    recipes.update(store, recipe.id, RecipeUpdate(tags=["a", "b"]))

    assert _count(store, "recipe_tags") == 2
    assert recipes.get(store, recipe.id).tags == ["a", "b"]


def test_update_missing_recipe(store):
    with pytest.raises(NotFound):
        recipes.update(store, 999, RecipeUpdate(title="Nope"))


def test_delete_sweeps_orphan_tags(store, make_recipe):
    only = make_recipe(title="Only", tags=["holiday"])
    assert recipes.delete(store, only.id) is True
    assert _count(store, "tags") == 0

    one = make_recipe(title="One", tags=["holiday"])
    make_recipe(title="Two", tags=["holiday"])
    recipes.delete(store, one.id)
    assert store.fetch_all("SELECT name FROM tags") == [{'name': 'holiday'}]


def test_delete_removes_children_and_image_files(store, make_recipe, make_image):
    recipe = make_recipe()
    image = images.add(store, recipe.id, make_image())
    assert os.path.exists(image.file_path)

    assert recipes.delete(store, recipe.id) is True

    assert not os.path.exists(image.file_path)
    assert _count(store, "ingredients") == 0
    assert _count(store, "recipe_images") == 0
    assert recipes.delete(store, recipe.id) is False


def test_list_admin_sorting_and_derived_columns(store, make_recipe):
    make_recipe(title="Zucchini Bread", ingredients=["zucchini", "flour"], tags=["snack", "baking"])
    make_recipe(title="Apple Pie", ingredients=["apple"], tags=[])

    rows, total = recipes.list_admin(store, sort_by="title", sort_order="asc")
    assert total == 2
    assert [r.title for r in rows] == ["Apple Pie", "Zucchini Bread"]
    assert rows[0].category is None
    assert rows[1].category == "baking"
    assert rows[1].main_ingredient == "zucchini"

    # Unknown sort input falls back to date_added DESC instead of reaching SQL
    rows, _ = recipes.list_admin(store, sort_by="title; DROP TABLE recipes", sort_order="sideways")
    assert len(rows) == 2


def test_calories_times_cooked_and_dashboard(store, make_recipe, make_pending):
    recipe = make_recipe(tags=["dessert"])
    make_recipe(title="Plain")
    make_pending()

    updated = recipes.update_calories(store, recipe.id, 420, "medium")
    assert (updated.estimated_calories, updated.calories_confidence) == (420, "medium")
    with pytest.raises(ValidationError):
        recipes.update_calories(store, recipe.id, 100, "extreme")

    assert recipes.increment_times_cooked(store, recipe.id).times_cooked == 1
    with pytest.raises(NotFound):
        recipes.increment_times_cooked(store, 999)

    stats = recipes.dashboard_stats(store)
    assert stats.total_recipes == 2
    assert stats.pending_recipes == 1
    assert stats.pending_submissions == 0
    assert stats.categories_count == 1
    assert stats.recent_recipes == 2
    assert stats.avg_calories == 420
    assert stats.recipes_with_calories == 1
    assert recipes.count(store) == 2


def test_create_and_update_validate_tag_text(store, make_recipe):
    with pytest.raises(ValidationError) as excinfo:
        recipes.create(store, "Pie", tags=["x" * 101])
    assert excinfo.value.errors == ["Tag 1 must be 100 characters or less"]
    with pytest.raises(ValidationError):
        recipes.create(store, "Pie", tags=["dessert", 42])
    assert _count(store, "recipes") == 0

    recipe = make_recipe(tags=["dessert"])
    with pytest.raises(ValidationError):
        recipes.update(store, recipe.id, RecipeUpdate(tags=["ok", "y" * 300]))
    assert recipes.get(store, recipe.id).tags == ["dessert"]

    assert recipes.create(store, "Long", tags=["z" * 100]).tags == ["z" * 100]


def test_search_treats_wildcards_literally(store, make_recipe):
    make_recipe(title="100% Rye", ingredients=["rye_flour"])
    make_recipe(title="1000 Rye", ingredients=["ryeXflour"])

    assert [r.title for r in recipes.search(store, title="100%")] == ["100% Rye"]
    assert [r.title for r in recipes.search(store, ingredient="rye_")] == ["100% Rye"]
    assert recipes.search(store, title="!") == []


def test_get_reads_one_snapshot_while_an_update_commits(store, make_recipe, monkeypatch):
    recipe = make_recipe(ingredients=["old"], tags=["oldtag"])
    original = recipes.fetch_ingredients
    writes = []

    with ThreadPoolExecutor(max_workers=1) as pool:
        def fetch_with_concurrent_update(runner, kind, owner_id):
            # Tags are already read; let another thread replace both lists now
            if not writes:
                writes.append(pool.submit(
                    recipes.update, store, recipe.id,
                    RecipeUpdate(ingredients=["new"], tags=["newtag"]),
                ))
                try:
                    writes[0].result(timeout=1)
                except FutureTimeout:
                    pass
            return original(runner, kind, owner_id)

        monkeypatch.setattr(recipes, "fetch_ingredients", fetch_with_concurrent_update)
        loaded = recipes.get(store, recipe.id)
        writes[0].result(timeout=30)

    assert loaded.tags == ["oldtag"]
    assert [i.name for i in loaded.ingredients] == ["old"]

    reloaded = recipes.get(store, recipe.id)
    assert reloaded.tags == ["newtag"]
    assert [i.name for i in reloaded.ingredients] == ["new"]
