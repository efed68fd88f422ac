"""Tests for slug normalization and allocation."""
import pytest

from app.models.product import Product
from app.services.slug_service import SlugAllocator, slugify


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Red Shoe", "red-shoe"),
        ("Red Shoe!!", "red-shoe"),
        ("  --Blue   Hat--  ", "blue-hat"),
        ("Crème Brûlée", "creme-brulee"),
        ("Men's T-Shirt (XL)", "mens-t-shirt-xl"),
        ("snake_case_name", "snake-case-name"),
        ("!!!", ""),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


def _persist(db, slug):
    db.add(Product(
        name=slug,
        description="d",
        slug=slug,
        status=True,
        stock=1,
        price=1,
        weight=1,
        category_id=1,
        color_id=1,
    ))
    db.commit()


def test_allocate_returns_base_when_free(db_session):
    assert SlugAllocator(db_session).allocate("Blue Hat") == "blue-hat"


def test_allocate_appends_counter_on_collision(db_session):
    allocator = SlugAllocator(db_session)

    slugs = []
    for _ in range(3):
        slug = allocator.allocate("Blue Hat")
        _persist(db_session, slug)
        slugs.append(slug)

    assert slugs == ["blue-hat", "blue-hat-1", "blue-hat-2"]


def test_names_with_same_base_get_distinct_slugs(db_session):
    allocator = SlugAllocator(db_session)

    first = allocator.allocate("Red Shoe!!")
    _persist(db_session, first)
    second = allocator.allocate("Red Shoe")

    assert first == "red-shoe"
    assert second == "red-shoe-1"


def test_allocate_skips_taken_suffixes(db_session):
    _persist(db_session, "hat")
    _persist(db_session, "hat-1")

    assert SlugAllocator(db_session).allocate("Hat") == "hat-2"


def test_allocate_empty_for_unusable_name(db_session):
    assert SlugAllocator(db_session).allocate("???") == ""
