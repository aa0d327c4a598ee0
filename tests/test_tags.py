# tests/test_tags.py
from concurrent.futures import ThreadPoolExecutor

import pytest

from services import ValidationError, recipes, tags


def test_normalize_tags_trims_lowercases_and_dedupes():
    assert tags.normalize_tag("  Dessert ") == "dessert"
    assert tags.normalize_tags(["Dessert", "dessert", " DESSERT", "", None, "Quick"]) == ["dessert", "quick"]


def test_get_or_create_is_idempotent_within_a_transaction(store):
    def work(tx):
        first = tags.get_or_create(tx, "Holiday")
        second = tags.get_or_create(tx, "  holiday ")
        return first, second

    first, second = store.with_transaction(work)
    assert first == second
    assert store.fetch_all("SELECT name FROM tags") == [{'name': 'holiday'}]


def test_get_or_create_rejects_blank_and_overlong_names(store):
    with pytest.raises(ValidationError):
        store.with_transaction(lambda tx: tags.get_or_create(tx, "   "))
    with pytest.raises(ValidationError):
        store.with_transaction(lambda tx: tags.get_or_create(tx, "t" * 101))
    assert store.fetch_one("SELECT COUNT(*) AS count FROM tags")['count'] == 0


def test_concurrent_get_or_create_yields_one_row(store):
    def create():
        return store.with_transaction(lambda tx: tags.get_or_create(tx, "brunch"))

    with ThreadPoolExecutor(max_workers=4) as pool:
        ids = list(pool.map(lambda _: create(), range(8)))

    assert len(set(ids)) == 1
    assert store.fetch_one("SELECT COUNT(*) AS count FROM tags")['count'] == 1


def test_linking_twice_is_harmless(store, make_recipe):
    recipe = make_recipe(tags=[])

    def work(tx):
        tag_id = tags.get_or_create(tx, "soup")
        tags.link(tx, recipe.id, tag_id)
        tags.link(tx, recipe.id, tag_id)

    store.with_transaction(work)
    assert store.fetch_one("SELECT COUNT(*) AS count FROM recipe_tags")['count'] == 1


def test_replace_recipe_tags_swaps_the_whole_set(store, make_recipe):
    recipe = make_recipe(tags=["a", "b"])

    store.with_transaction(lambda tx: tags.replace_recipe_tags(tx, recipe.id, ["C", "b"]))
    assert recipes.get(store, recipe.id).tags == ["b", "c"]

    store.with_transaction(lambda tx: tags.replace_recipe_tags(tx, recipe.id, []))
    assert recipes.get(store, recipe.id).tags == []


def test_cleanup_orphans_removes_only_unreferenced_tags(store, make_recipe):
    make_recipe(tags=["kept"])
    store.execute("INSERT INTO tags (name, created_at) VALUES ('stray', 1)")

    removed = tags.cleanup_orphans(store)

    assert removed == 1
    assert [row['name'] for row in store.fetch_all("SELECT name FROM tags")] == ["kept"]


def test_list_used_tags_is_alphabetical(store, make_recipe):
    make_recipe(title="One", tags=["zesty", "Apple"])
    make_recipe(title="Two", tags=["apple", "mild"])

    assert tags.list_used_tags(store) == ["apple", "mild", "zesty"]
