# tests/test_pending.py
import os

import pytest

from models import DraftInput, DraftUpdate
from services import NotFound, ValidationError, files, pending


def test_create_and_get_pending(store, make_pending):
    pending_id = make_pending(tags=["Dinner", " Comfort Food "])

    draft = pending.get_pending(store, pending_id)
    assert draft.title == "Grandma's Stew"
    assert draft.original_name == "Stew.pdf"
    assert draft.raw_text == "raw"
    assert draft.parsed_data == {'title': "Grandma's Stew"}
    assert [(i.name, i.quantity, i.unit) for i in draft.ingredients] == [
        ("beef", "2", "lb"),
        ("carrot", "3", None),
    ]
    # Draft tags stay as entered until promotion
    assert draft.tags == ["Dinner", "Comfort Food"]
    assert draft.image_url is None


def test_invalid_parsed_data_is_returned_as_text(store):
    file_id = files.create_file(store, "x.pdf", "x.pdf", "/tmp/x.pdf", 1, "application/pdf", 1)
    pending_id = pending.create_pending(store, file_id, DraftInput(title="X"), parsed_data="{not json")

    assert pending.get_pending(store, pending_id).parsed_data == "{not json"


def test_create_pending_rejects_bad_ingredients(store):
    file_id = files.create_file(store, "x.pdf", "x.pdf", "/tmp/x.pdf", 1, "application/pdf", 1)
    with pytest.raises(ValidationError):
        pending.create_pending(store, file_id, DraftInput(title="X", ingredients="salt"))
    assert pending.list_pending(store) == []


def test_list_pending_newest_first(store, make_pending):
    old = make_pending(title="Old")
    new = make_pending(title="New")
    store.execute("UPDATE pending_recipes SET created_at = 100 WHERE id = :id", {'id': old})
    store.execute("UPDATE pending_recipes SET created_at = 200 WHERE id = :id", {'id': new})

    summaries = pending.list_pending(store)
    assert [s.title for s in summaries] == ["New", "Old"]
    assert summaries[0].has_image is False


def test_list_pending_by_file(store, make_pending):
    pending_id = make_pending()
    file_id = pending.get_pending(store, pending_id).file_id

    assert [s.id for s in pending.list_pending_by_file(store, file_id)] == [pending_id]
    assert pending.list_pending_by_file(store, file_id + 100) == []


def test_update_distinguishes_absent_from_empty(store, make_pending):
    pending_id = make_pending()

    updated = pending.update_pending(store, pending_id, DraftUpdate(title="Beef Stew"))
    assert updated.title == "Beef Stew"
    assert len(updated.ingredients) == 2
    assert updated.tags == ["Dinner"]

    cleared = pending.update_pending(store, pending_id, DraftUpdate(ingredients=[], tags=[]))
    assert cleared.title == "Beef Stew"
    assert cleared.ingredients == []
    assert cleared.tags == []


def test_update_missing_pending(store):
    with pytest.raises(NotFound):
        pending.update_pending(store, 42, DraftUpdate(title="Nope"))


def test_delete_pending_removes_downloaded_image(store, make_pending, make_image):
    image = make_image()
    pending_id = make_pending(image=image)
    assert pending.get_pending(store, pending_id).image_url.endswith(image.filename)
    assert pending.list_pending(store)[0].has_image is True

    assert pending.delete_pending(store, pending_id) is True

    assert not os.path.exists(image.file_path)
    assert pending.get_pending(store, pending_id) is None
    assert store.fetch_one("SELECT COUNT(*) AS count FROM pending_ingredients")['count'] == 0
    assert store.fetch_one("SELECT COUNT(*) AS count FROM pending_tags")['count'] == 0
    assert pending.delete_pending(store, pending_id) is False
