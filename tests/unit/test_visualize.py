"""Relation path figure tests"""
import matplotlib.pyplot as plt

from catalog_ranker.core.kg_builder import build_kg
from catalog_ranker.core.related import related_items
from catalog_ranker.core.visualize import visualize_related_paths


class TestVisualizeRelatedPaths:
    def test_draws_paths(self, catalog, by_id):
        focal = by_id["re4"]
        related = related_items(focal, catalog)
        open_before = plt.get_fignums()
        fig = visualize_related_paths(build_kg(catalog, focal=focal), focal, related.products)
        assert fig is not None
        assert "Resident Evil 4 Remake PS5" in fig.gca().get_title()
        assert plt.get_fignums() == open_before

    def test_no_results(self, catalog, by_id):
        focal = by_id["re4"]
        assert visualize_related_paths(build_kg(catalog, focal=focal), focal, []) is None

    def test_unconnected_results(self, catalog, by_id):
        focal = by_id["mouse"]
        related = related_items(focal, catalog)
        assert related.products
        assert visualize_related_paths(build_kg(catalog, focal=focal), focal, related.products) is None
