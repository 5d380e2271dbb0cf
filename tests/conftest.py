"""Shared test setup: headless matplotlib and catalog builders."""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

from typing import List, Optional, Tuple

import pytest

from catalog_ranker.models.product import Product, Tag
from tests.fixtures.catalog import GAME_CATALOG


def make_product(
    product_id: str,
    name: str,
    tags: Optional[List[Tuple[str, str, str, int]]] = None,
    category: str = "Jogos",
    price: float = 100.0,
    active: bool = True,
    product_type: str = "simple",
) -> Product:
    """Build a product from (tag_id, name, category, weight) tuples."""
    return Product(
        product_id=product_id,
        name=name,
        category=category,
        tags=[Tag(tag_id=t[0], name=t[1], category=t[2], weight=t[3]) for t in tags or []],
        price=price,
        active=active,
        product_type=product_type,
    )


@pytest.fixture
def catalog() -> List[Product]:
    return [Product.from_dict(item) for item in GAME_CATALOG]


@pytest.fixture
def by_id(catalog):
    return {p.product_id: p for p in catalog}


@pytest.fixture
def product_factory():
    return make_product
