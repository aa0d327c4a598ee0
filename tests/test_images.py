# tests/test_images.py
import os

import pytest

from models import ImageMeta
from services import NotFound, ValidationError, images, recipes
from utils.image_handler import ImageValidationError


def test_store_upload_reencodes_as_jpeg(image_dir, image_bytes):
    meta = images.store_upload(image_bytes(), image_dir, original_name="cat.png")

    assert meta.filename.endswith(".jpg")
    assert meta.original_name == "cat.png"
    assert meta.mime_type == "image/jpeg"
    assert os.path.getsize(meta.file_path) == meta.file_size
    with open(meta.file_path, 'rb') as f:
        assert f.read(2) == b'\xff\xd8'


def test_store_upload_rejects_non_images(image_dir):
    with pytest.raises(ImageValidationError):
        images.store_upload(b"<script>alert(1)</script>", image_dir)


def test_add_appends_positions_and_sets_single_hero(store, make_recipe, make_image):
    recipe = make_recipe()

    first = images.add(store, recipe.id, make_image("one.png"), is_hero=True)
    second = images.add(store, recipe.id, make_image("two.png"), is_hero=True, uploaded_by=7)

    assert (first.position, second.position) == (0, 1)
    assert second.uploaded_by == 7
    heroes = [img for img in images.list_images(store, recipe.id) if img.is_hero]
    assert [img.id for img in heroes] == [second.id]
    assert images.get_hero(store, recipe.id).id == second.id
    assert images.count_images(store, recipe.id) == 2
    assert recipes.get(store, recipe.id).hero_image == second.url


def test_add_to_missing_recipe(store, make_image):
    with pytest.raises(NotFound):
        images.add(store, 404, make_image())


def test_add_requires_file_metadata(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(ValidationError):
        images.add(store, recipe.id, ImageMeta(filename="", file_path=""))


def test_hero_falls_back_to_first_image_then_legacy_path(store, make_recipe, make_image):
    recipe = make_recipe(image_path="/legacy/pie.jpg")
    assert recipes.get(store, recipe.id).hero_image == "/legacy/pie.jpg"

    image = images.add(store, recipe.id, make_image())
    assert recipes.get(store, recipe.id).hero_image == image.url


def test_set_hero(store, make_recipe, make_image):
    recipe = make_recipe()
    other = make_recipe(title="Other")
    first = images.add(store, recipe.id, make_image(), is_hero=True)
    second = images.add(store, recipe.id, make_image())
    foreign = images.add(store, other.id, make_image())

    result = images.set_hero(store, second.id, recipe.id)
    assert result.is_hero
    assert not images.get_image(store, first.id).is_hero

    # Setting it again changes nothing
    images.set_hero(store, second.id, recipe.id)
    assert images.get_hero(store, recipe.id).id == second.id

    with pytest.raises(NotFound):
        images.set_hero(store, foreign.id, recipe.id)


def test_reorder_sets_positions(store, make_recipe, make_image):
    recipe = make_recipe()
    a = images.add(store, recipe.id, make_image())
    b = images.add(store, recipe.id, make_image())
    c = images.add(store, recipe.id, make_image())

    images.reorder(store, recipe.id, [c.id, a.id, b.id])

    positions = {img.id: img.position for img in images.list_images(store, recipe.id)}
    assert positions == {c.id: 0, a.id: 1, b.id: 2}


def test_reorder_rejects_foreign_images_without_writing(store, make_recipe, make_image):
    recipe_a = make_recipe(title="A")
    recipe_b = make_recipe(title="B")
    own = images.add(store, recipe_a.id, make_image())
    foreign = images.add(store, recipe_b.id, make_image())

    with pytest.raises(ValidationError) as excinfo:
        images.reorder(store, recipe_a.id, [foreign.id])
    assert excinfo.value.errors

    assert images.get_image(store, own.id).position == 0
    assert images.get_image(store, foreign.id).position == 0


@pytest.mark.parametrize("ids", ["1,2", [1, 1], ["x"]])
def test_reorder_rejects_malformed_lists(store, make_recipe, ids):
    recipe = make_recipe()
    with pytest.raises(ValidationError):
        images.reorder(store, recipe.id, ids)


def test_reorder_requires_every_image(store, make_recipe, make_image):
    recipe = make_recipe()
    a = images.add(store, recipe.id, make_image())
    images.add(store, recipe.id, make_image())

    with pytest.raises(ValidationError):
        images.reorder(store, recipe.id, [a.id])


def test_delete_keeps_positions_dense(store, make_recipe, make_image):
    recipe = make_recipe()
    a = images.add(store, recipe.id, make_image())
    b = images.add(store, recipe.id, make_image())
    c = images.add(store, recipe.id, make_image())

    assert images.delete(store, b.id) is True

    assert not os.path.exists(b.file_path)
    remaining = images.list_images(store, recipe.id)
    assert [(img.id, img.position) for img in remaining] == [(a.id, 0), (c.id, 1)]
    assert images.delete(store, b.id) is False


def test_delete_survives_a_missing_file(store, make_recipe, make_image):
    recipe = make_recipe()
    image = images.add(store, recipe.id, make_image())
    os.remove(image.file_path)

    assert images.delete(store, image.id) is True
    assert images.count_images(store, recipe.id) == 0


def test_public_view_hides_server_paths(store, make_recipe, make_image):
    recipe = make_recipe()
    image = images.add(store, recipe.id, make_image())

    public = image.public()
    assert 'file_path' not in public
    assert public['url'] == f"/uploads/images/{image.filename}"
