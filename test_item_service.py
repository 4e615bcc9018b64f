"""
Tests for the item repository
"""

import pytest

from app.core.exceptions import ConstraintViolation, NotFound
from app.models.item import Item
from app.services.category import CategoryService
from app.services.item import ItemRow, ItemService, SearchRow, escape_like


@pytest.fixture
def seeded(db):
    categories = CategoryService(db)
    items = ItemService(db)
    kitchen = categories.resolve_or_create("kitchen")
    garden = categories.resolve_or_create("garden")
    ids = [
        items.insert("mug", kitchen, "a.jpg"),
        items.insert("Shovel", garden, "b.jpg"),
        items.insert("MUSIC box", kitchen, "c.jpg"),
        items.insert("100% cotton towel", kitchen, "d.jpg"),
    ]
    db.commit()
    return ids


def test_insert_rejects_unknown_category(db):
    with pytest.raises(ConstraintViolation) as exc_info:
        ItemService(db).insert("mug", 999, "a.jpg")
    db.rollback()

    assert exc_info.value.stage == "insert"
    assert db.query(Item).count() == 0


def test_get_by_id(db, seeded):
    item = ItemService(db).get_by_id(seeded[0])

    assert item == ItemRow(id=seeded[0], name="mug", category="kitchen", image_name="a.jpg")


def test_get_by_id_not_found(db, seeded):
    with pytest.raises(NotFound):
        ItemService(db).get_by_id(max(seeded) + 1)


def test_list_all_in_insertion_order(db, seeded):
    items = ItemService(db).list_all()

    assert [item.id for item in items] == seeded
    assert [(item.name, item.category) for item in items] == [
        ("mug", "kitchen"),
        ("Shovel", "garden"),
        ("MUSIC box", "kitchen"),
        ("100% cotton towel", "kitchen"),
    ]


def test_list_all_empty(db):
    assert ItemService(db).list_all() == []


def test_search_is_case_insensitive_substring(db, seeded):
    results = ItemService(db).search_by_name_substring("mu")

    assert results == [
        SearchRow(name="mug", category="kitchen"),
        SearchRow(name="MUSIC box", category="kitchen"),
    ]


def test_search_empty_keyword_matches_everything(db, seeded):
    assert len(ItemService(db).search_by_name_substring("")) == len(seeded)


def test_search_treats_wildcards_literally(db, seeded):
    service = ItemService(db)

    assert [r.name for r in service.search_by_name_substring("%")] == ["100% cotton towel"]
    assert service.search_by_name_substring("_") == []


def test_search_no_match(db, seeded):
    assert ItemService(db).search_by_name_substring("teapot") == []


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
