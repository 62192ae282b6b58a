"""Tests for BrandService and CategoryService."""

import pytest

from catalog.errors import BadRequestError, ConflictError, NotFoundError
from catalog.services.brand_service import BrandService
from catalog.services.category_service import CategoryService


class TestBrandService:
    @pytest.fixture
    def brands(self):
        return BrandService()

    def test_slug_from_name_or_given(self, brands):
        assert brands.create({"name": "Blue Moon"})["slug"] == "blue-moon"
        assert brands.create({"name": "Other", "slug": "Custom Slug"})["slug"] == "custom-slug"

    def test_duplicate_name_or_slug(self, brands):
        brands.create({"name": "Acme"})
        with pytest.raises(ConflictError):
            brands.create({"name": "Acme"})
        with pytest.raises(ConflictError):
            brands.create({"name": "Acme Corp", "slug": "acme"})

    def test_find_all_hides_inactive_and_deleted(self, brands):
        kept = brands.create({"name": "Kept"})
        brands.create({"name": "Hidden", "is_active": False})
        gone = brands.create({"name": "Gone"})
        brands.remove(gone["id"])

        assert [b["id"] for b in brands.find_all()] == [kept["id"]]
        with pytest.raises(NotFoundError):
            brands.find_one(gone["id"])

    def test_update_conflict_excludes_self(self, brands):
        acme = brands.create({"name": "Acme"})
        brands.create({"name": "Globex"})

        assert brands.update(acme["id"], {"name": "Acme"})["slug"] == "acme"
        with pytest.raises(ConflictError):
            brands.update(acme["id"], {"name": "Globex"})

    def test_slug_without_letters_or_digits_is_rejected(self, brands):
        acme = brands.create({"name": "Acme"})

        with pytest.raises(BadRequestError):
            brands.create({"name": "Globex", "slug": "***"})
        with pytest.raises(BadRequestError):
            brands.update(acme["id"], {"slug": "***"})
        assert brands.find_one(acme["id"])["slug"] == "acme"


class TestCategoryService:
    @pytest.fixture
    def categories(self):
        return CategoryService()

    def test_electronics_scenario(self, categories):
        assert categories.create({"name": "Electronics"})["slug"] == "electronics"
        with pytest.raises(ConflictError):
            categories.create({"name": "Electronics"})

    def test_deleted_category_still_blocks_slug(self, categories):
        category = categories.create({"name": "Toys"})
        categories.remove(category["id"])

        with pytest.raises(ConflictError):
            categories.create({"name": "Toys"})

    def test_search_over_name_or_slug(self, categories):
        categories.create({"name": "Home Garden", "slug": "outdoor"})
        categories.create({"name": "Books"})

        assert [c["name"] for c in categories.find_all(search="OUTDOOR")] == ["Home Garden"]
        assert [c["name"] for c in categories.find_all(search="garden")] == ["Home Garden"]

    def test_paginated_find_all(self, categories):
        for name in ("A", "B", "C"):
            categories.create({"name": name})

        result = categories.find_all(page=2, limit=2)
        assert len(result["data"]) == 1
        assert result["pagination"]["totalPages"] == 2

    def test_find_one_lists_live_sub_categories(self, categories):
        category = categories.create({"name": "Electronics"})
        categories.create_sub_category({"name": "Phones", "category_id": category["id"]})
        gone = categories.create_sub_category({"name": "Pagers", "category_id": category["id"]})
        categories.remove_sub_category(gone["id"])

        found = categories.find_one(category["id"])
        assert [s["slug"] for s in found["subCategories"]] == ["phones"]

    def test_slug_without_letters_or_digits_is_rejected(self, categories):
        with pytest.raises(BadRequestError):
            categories.create({"name": "Tools", "slug": "!!!"})
        assert categories.find_all() == []

        tools = categories.create({"name": "Tools"})
        with pytest.raises(BadRequestError):
            categories.update(tools["id"], {"slug": "---"})
        assert categories.find_one(tools["id"])["slug"] == "tools"


class TestSubCategories:
    @pytest.fixture
    def categories(self):
        return CategoryService()

    @pytest.fixture
    def parents(self, categories):
        return categories.create({"name": "Men"}), categories.create({"name": "Women"})

    def test_slug_scoped_to_category(self, categories, parents):
        men, women = parents
        categories.create_sub_category({"name": "Shoes", "category_id": men["id"]})
        categories.create_sub_category({"name": "Shoes", "category_id": women["id"]})

        with pytest.raises(ConflictError):
            categories.create_sub_category({"name": "Shoes", "category_id": men["id"]})

    def test_missing_parent(self, categories):
        with pytest.raises(NotFoundError):
            categories.create_sub_category({"name": "Shoes", "category_id": "missing"})

    def test_move_rechecks_scope(self, categories, parents):
        men, women = parents
        categories.create_sub_category({"name": "Shoes", "category_id": men["id"]})
        womens_shoes = categories.create_sub_category({"name": "Shoes", "category_id": women["id"]})
        hats = categories.create_sub_category({"name": "Hats", "category_id": women["id"]})

        with pytest.raises(ConflictError):
            categories.update_sub_category(womens_shoes["id"], {"category_id": men["id"]})
        moved = categories.update_sub_category(hats["id"], {"category_id": men["id"]})
        assert moved["categoryId"] == men["id"]

    def test_find_all_search_within_category(self, categories, parents):
        men, women = parents
        categories.create_sub_category({"name": "Running Shoes", "category_id": men["id"]})
        categories.create_sub_category({"name": "Trail", "slug": "running-trail", "category_id": women["id"]})

        assert len(categories.find_all_sub_categories(search="running")) == 2
        only_women = categories.find_all_sub_categories(search="running", category_id=women["id"])
        assert [s["name"] for s in only_women] == ["Trail"]
        assert only_women[0]["category"]["id"] == women["id"]

    def test_find_by_category(self, categories, parents):
        men, _ = parents
        categories.create_sub_category({"name": "Shoes", "category_id": men["id"]})

        assert len(categories.find_sub_categories_by_category(men["id"])) == 1
        with pytest.raises(NotFoundError):
            categories.find_sub_categories_by_category("missing")

    def test_sub_category_slug_without_letters_or_digits(self, categories, parents):
        men, _ = parents
        with pytest.raises(BadRequestError):
            categories.create_sub_category({"name": "Shoes", "slug": "!!!", "category_id": men["id"]})

        shoes = categories.create_sub_category({"name": "Shoes", "category_id": men["id"]})
        with pytest.raises(BadRequestError):
            categories.update_sub_category(shoes["id"], {"slug": "???"})
