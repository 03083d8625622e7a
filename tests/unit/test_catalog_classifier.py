"""
Unit tests for the catalog classifier.

Run: pytest tests/unit/test_catalog_classifier.py -v
"""

import pytest

from models.catalog import Product, ProductVariant, SelectedOption
from models.merchandising import GarmentType
from services.catalog_classifier import (
    classify,
    classify_all,
    count_available_sizes,
    extract_color,
    extract_drop_group,
    extract_garment_type,
    is_special_item,
)
from tests.factories import ProductFactory


class TestExtractColor:
    """Tests for extract_color()"""

    def test_matches_case_insensitively(self):
        assert extract_color(["summer", "black"]) == "BLACK"

    def test_first_matching_tag_wins(self):
        assert extract_color(["Navy", "Red"]) == "NAVY"

    def test_partial_words_do_not_match(self):
        """'Redwood' is not RED."""
        assert extract_color(["Redwood", "Blackout"]) is None

    def test_no_tags_returns_none(self):
        assert extract_color([]) is None


class TestExtractDropGroup:
    """Tests for extract_drop_group()"""

    def test_returns_first_group_tag_verbatim(self):
        assert extract_drop_group(["Black", "Group_FW24", "Group_SS25"]) == "Group_FW24"

    def test_prefix_is_case_sensitive(self):
        assert extract_drop_group(["group_fw24"]) is None

    def test_no_group_returns_none(self):
        assert extract_drop_group(["Black"]) is None


class TestExtractGarmentType:
    """Tests for extract_garment_type()"""

    @pytest.mark.parametrize("title,expected", [
        ("Oversized Hoodie Black", GarmentType.HOODIE),
        ("Classic crewneck", GarmentType.CREWNECK),
        ("Baggy Jeans", GarmentType.JEANS),
        ("Cargo Pants", GarmentType.PANTS),
        ("Retro Jersey", GarmentType.JERSEY),
        ("Longsleeve Logo", GarmentType.LONGSLEEVE),
        ("Runner Sneakers", GarmentType.SNEAKERS),
        ("Bucket Hat", GarmentType.OTHER),
    ])
    def test_keyword_mapping(self, title, expected):
        assert extract_garment_type(title) == expected

    def test_earlier_keyword_wins(self):
        """HOODIE is checked before PANTS."""
        assert extract_garment_type("Hoodie + Pants Set") == GarmentType.HOODIE

    def test_empty_title_is_other(self):
        assert extract_garment_type("") == GarmentType.OTHER


class TestCountAvailableSizes:
    """Tests for count_available_sizes()"""

    def test_counts_in_stock_sized_variants(self):
        variants = [
            ProductVariant(inventory_quantity=3, selected_options=[SelectedOption(name="Size", value="S")]),
            ProductVariant(inventory_quantity=0, selected_options=[SelectedOption(name="Size", value="M")]),
            ProductVariant(inventory_quantity=-2, selected_options=[SelectedOption(name="Size", value="L")]),
            ProductVariant(inventory_quantity=1, selected_options=[SelectedOption(name="Talla", value="XL")]),
        ]
        assert count_available_sizes(variants) == 2

    def test_variants_without_size_option_are_ignored(self):
        variants = [
            ProductVariant(inventory_quantity=5, selected_options=[SelectedOption(name="Color", value="Black")]),
            ProductVariant(inventory_quantity=5, selected_options=[]),
        ]
        assert count_available_sizes(variants) == 0


class TestIsSpecialItem:
    """Tests for is_special_item()"""

    def test_gift_card_title(self):
        assert is_special_item("Digital Gift Card") is True

    def test_regular_title(self):
        assert is_special_item("Gift Hoodie") is False


class TestClassify:
    """Tests for classify()"""

    def test_full_facets(self):
        product = ProductFactory.create(
            id="gid://shopify/Product/1",
            title="Heavy Hoodie",
            tags=["Black", "Group_Drop1"],
        )

        result = classify(product, {"gid://shopify/Product/1": 7}, set())

        assert result.product_id == "gid://shopify/Product/1"
        assert result.color == "BLACK"
        assert result.drop_group == "Group_Drop1"
        assert result.garment_type == GarmentType.HOODIE
        assert result.is_main_type is True
        assert result.available_size_count == 4
        assert result.has_sufficient_sizes is True
        assert result.is_sold_out is False
        assert result.is_seasonally_excluded is False
        assert result.sales_count == 7

    def test_unknown_product_gets_defaults(self):
        product = Product(id="gid://shopify/Product/2")

        result = classify(product, {}, set())

        assert result.color is None
        assert result.drop_group is None
        assert result.garment_type == GarmentType.OTHER
        assert result.sales_count == 0
        assert result.has_sufficient_sizes is False

    def test_sold_out_requires_tracking(self):
        tracked = ProductFactory.create(total_inventory=0, tracks_inventory=True)
        untracked = ProductFactory.create(total_inventory=0, tracks_inventory=False)

        assert classify(tracked, {}, set()).is_sold_out is True
        assert classify(untracked, {}, set()).is_sold_out is False

    def test_min_sizes_threshold(self):
        product = ProductFactory.create(sizes=["S", "M", "L"])

        assert classify(product, {}, set(), min_sizes=4).has_sufficient_sizes is False
        assert classify(product, {}, set(), min_sizes=3).has_sufficient_sizes is True

    def test_gift_card_always_has_sufficient_sizes(self):
        product = ProductFactory.create(title="Gift Card", sizes=[])

        result = classify(product, {}, set())

        assert result.is_special_item is True
        assert result.has_sufficient_sizes is True

    def test_seasonal_membership(self):
        product = ProductFactory.create(id="gid://shopify/Product/3")

        result = classify(product, {}, {"gid://shopify/Product/3"})

        assert result.is_seasonally_excluded is True

    def test_classify_all_keeps_catalog_order(self):
        products = [ProductFactory.create(id=f"p{i}") for i in range(3)]

        result = classify_all(products, {}, set())

        assert [f.product_id for f in result] == ["p0", "p1", "p2"]
