"""Tests for the catalogue registry and its seed data."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from pizzeria.catalogue.product import Product
from pizzeria.catalogue.registry import CatalogRegistry
from pizzeria.catalogue.seed import DELIVERY_AREAS, format_address, seed_catalog


class TestSeed:
    def test_seeded_products(self, catalog):
        assert [(p.product_id, p.name, p.base_price) for p in catalog.all_products()] == [
            (1, "Margherita", 10.0),
            (2, "Pepperoni", 12.0),
        ]

    def test_seeding_twice_adds_new_ids(self):
        registry = CatalogRegistry()
        seed_catalog(registry)
        seed_catalog(registry)
        assert [p.product_id for p in registry.all_products()] == [1, 2, 3, 4]

    def test_delivery_areas(self):
        assert len(DELIVERY_AREAS) == 15
        assert DELIVERY_AREAS[0] == "Colombo 1 - Fort"

    def test_format_address(self):
        assert format_address("Colombo 1 - Fort", " Main St ", " 5B") == "Colombo 1 - Fort, Main St, 5B"


class TestRegistry:
    def test_custom_product_gets_next_id(self, catalog):
        product = Product.customize(
            product_id=catalog.next_identity(),
            name="",
            crust="Thin",
            sauce="Tomato",
            cheese="Cheddar",
            toppings=[],
            price=20.0,
        )
        catalog.add_product(product)
        assert product.product_id == 3
        assert len(catalog) == 3

    def test_duplicate_id(self, catalog, margherita):
        with pytest.raises(ValidationError):
            catalog.add_product(margherita)

    def test_get_unknown(self, catalog):
        with pytest.raises(ObjectNotFoundError):
            catalog.get(99)

    def test_rate(self, catalog):
        catalog.rate(1, 4)
        product = catalog.rate(1, 2)
        assert product.average_rating == pytest.approx(3.0)
        assert product.rating_count == 2

    def test_rate_unknown(self, catalog):
        with pytest.raises(ObjectNotFoundError):
            catalog.rate(99, 4)
