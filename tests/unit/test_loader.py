"""Catalog / taxonomy loading tests"""
import json

import pytest

from catalog_ranker.core.taxonomy import DEFAULT_TAXONOMY
from catalog_ranker.data_access.loader import (
    JsonCatalogProvider,
    load_catalog,
    load_taxonomy,
    parse_catalog,
)
from catalog_ranker.models.product import CategoryBucket, TagCategory
from catalog_ranker.utils.exceptions import DataLoadError


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestParseCatalog:
    def test_list_and_wrapped_forms(self):
        record = {"id": "p1", "name": "P1", "tags": ["Jogo"]}
        assert parse_catalog([record])[0].product_id == "p1"
        assert parse_catalog({"products": [record]})[0].product_id == "p1"

    def test_bad_records_are_skipped(self, caplog):
        products = parse_catalog([{"name": "no id"}, 5, {"id": "ok", "name": "Ok"}])
        assert [p.product_id for p in products] == ["ok"]
        assert len(caplog.records) >= 2

    def test_wrong_shape(self):
        with pytest.raises(DataLoadError):
            parse_catalog({"items": []})
        with pytest.raises(DataLoadError):
            parse_catalog("products")


class TestLoadCatalog:
    def test_bundled_catalog(self):
        products = load_catalog()
        assert len(products) == 10
        assert sum(1 for p in products if not p.active) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError):
            load_catalog(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(DataLoadError):
            load_catalog(str(path))

    def test_provider_returns_active_products(self, tmp_path):
        path = _write(tmp_path / "catalog.json", [
            {"id": "a", "name": "A"},
            {"id": "b", "name": "B", "active": False},
            {"id": "m", "name": "M", "product_type": "master"},
        ])
        products = JsonCatalogProvider(path).fetch_active_catalog()
        assert [p.product_id for p in products] == ["a", "m"]


class TestLoadTaxonomy:
    def test_bundled_taxonomy(self):
        taxonomy = load_taxonomy()
        assert taxonomy.category_weights == DEFAULT_TAXONOMY.category_weights
        assert taxonomy.tag_categories["capcom"] == TagCategory.DEVELOPER
        assert list(taxonomy.bucket_keywords)[0] == CategoryBucket.GAMES

    def test_must_be_an_object(self, tmp_path):
        with pytest.raises(DataLoadError):
            load_taxonomy(_write(tmp_path / "taxonomy.json", ["FRANCHISE"]))
