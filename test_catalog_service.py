"""
Tests for the add-item workflow and the read use cases
"""

import hashlib
from io import BytesIO

import pytest

from app.core.exceptions import BadInput, ConstraintViolation, SourceUnreadable
from app.models.category import Category
from app.models.item import Item
from app.services.catalog import CatalogService

MUG_IMAGE = b"0123456789abcdefg"  # 17 bytes
MUG_IMAGE_NAME = f"{hashlib.sha256(MUG_IMAGE).hexdigest()}.jpg"


class UnreadableUpload:
    def read(self, size=-1):
        raise OSError("client went away")


def image_files(store):
    if not store.image_dir.exists():
        return []
    return sorted(p.name for p in store.image_dir.iterdir())


def test_add_item_creates_category_and_item(db, store):
    service = CatalogService(db, store)

    result = service.add_item("mug", "kitchen", MUG_IMAGE)

    assert result.name == "mug"
    assert result.category == "kitchen"
    assert result.image_name == MUG_IMAGE_NAME
    assert db.query(Category).filter(Category.name == "kitchen").count() == 1

    listed = [(i.name, i.category, i.image_name) for i in service.list_items()]
    assert ("mug", "kitchen", MUG_IMAGE_NAME) in listed
    assert (store.image_dir / MUG_IMAGE_NAME).read_bytes() == MUG_IMAGE


def test_add_item_reuses_category_and_image(db, store):
    service = CatalogService(db, store)

    first = service.add_item("mug", "kitchen", MUG_IMAGE)
    second = service.add_item("mug", "kitchen", BytesIO(MUG_IMAGE))

    assert first.id != second.id
    assert first.image_name == second.image_name
    assert db.query(Category).count() == 1
    assert db.query(Item).count() == 2
    assert image_files(store) == [MUG_IMAGE_NAME]


def test_add_item_strips_fields(db, store):
    result = CatalogService(db, store).add_item("  mug ", " kitchen\n", MUG_IMAGE)

    assert (result.name, result.category) == ("mug", "kitchen")


@pytest.mark.parametrize(
    "name, category, image, missing",
    [
        (None, "kitchen", MUG_IMAGE, "name"),
        ("mug", "   ", MUG_IMAGE, "category"),
        ("mug", "kitchen", None, "image"),
        ("mug", "kitchen", b"", "image"),
    ],
)
def test_add_item_rejects_missing_fields_without_side_effects(
    db, store, name, category, image, missing
):
    with pytest.raises(BadInput) as exc_info:
        CatalogService(db, store).add_item(name, category, image)

    assert missing in exc_info.value.message
    assert exc_info.value.stage == "validate"
    assert image_files(store) == []
    assert db.query(Category).count() == 0
    assert db.query(Item).count() == 0


def test_add_item_unreadable_image_writes_nothing(db, store):
    with pytest.raises(SourceUnreadable) as exc_info:
        CatalogService(db, store).add_item("mug", "kitchen", UnreadableUpload())

    assert exc_info.value.stage == "image"
    assert db.query(Category).count() == 0
    assert db.query(Item).count() == 0


def test_add_item_rolls_back_category_when_insert_fails(db, store, monkeypatch):
    service = CatalogService(db, store)

    def failing_insert(name, category_id, image_name):
        raise ConstraintViolation("FOREIGN KEY constraint failed")

    monkeypatch.setattr(service.items, "insert", failing_insert)

    with pytest.raises(ConstraintViolation) as exc_info:
        service.add_item("mug", "kitchen", MUG_IMAGE)

    assert exc_info.value.stage == "insert"
    assert db.query(Category).count() == 0
    assert db.query(Item).count() == 0
    # The content-addressed file is kept as a harmless orphan
    assert image_files(store) == [MUG_IMAGE_NAME]


def test_add_item_after_rollback_succeeds(db, store, monkeypatch):
    service = CatalogService(db, store)
    real_insert = service.items.insert
    attempts = []

    def flaky_insert(name, category_id, image_name):
        attempts.append(name)
        if len(attempts) == 1:
            raise ConstraintViolation("transient")
        return real_insert(name, category_id, image_name)

    monkeypatch.setattr(service.items, "insert", flaky_insert)

    with pytest.raises(ConstraintViolation):
        service.add_item("mug", "kitchen", MUG_IMAGE)
    result = service.add_item("mug", "kitchen", MUG_IMAGE)

    assert service.get_item(result.id).image_name == MUG_IMAGE_NAME
    assert db.query(Category).count() == 1


def test_every_item_references_an_existing_category(db, store):
    service = CatalogService(db, store)
    for name, category in [("mug", "kitchen"), ("rake", "garden"), ("pan", "kitchen")]:
        service.add_item(name, category, f"{name}-image".encode())

    orphans = (
        db.query(Item)
        .outerjoin(Category, Item.category_id == Category.id)
        .filter(Category.id.is_(None))
        .count()
    )
    assert orphans == 0


def test_search_after_adding(db, store):
    service = CatalogService(db, store)
    service.add_item("mug", "kitchen", MUG_IMAGE)
    service.add_item("rake", "garden", b"rake image bytes")

    assert [r.name for r in service.search_items("mu")] == ["mug"]
    assert len(service.search_items("")) == 2
    assert len(service.search_items(None)) == 2


@pytest.mark.parametrize(
    "name, category, field",
    [
        ("m" * 256, "kitchen", "name"),
        ("mug", "k" * 101, "category"),
    ],
)
def test_add_item_rejects_overlong_fields(db, store, name, category, field):
    with pytest.raises(BadInput) as exc_info:
        CatalogService(db, store).add_item(name, category, MUG_IMAGE)

    assert exc_info.value.message == f"Invalid field(s): {field}"
    assert exc_info.value.stage == "validate"
    assert image_files(store) == []
    assert db.query(Category).count() == 0


def test_add_item_accepts_fields_at_column_width(db, store):
    result = CatalogService(db, store).add_item("m" * 255, "k" * 100, MUG_IMAGE)

    assert len(result.name) == 255
    assert len(result.category) == 100
