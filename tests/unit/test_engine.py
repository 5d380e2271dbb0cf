"""RankingEngine tests"""
from catalog_ranker.core.engine import RankingEngine
from catalog_ranker.core.kg_builder import product_node
from catalog_ranker.core.taxonomy import DEFAULT_CATEGORY_WEIGHTS, Taxonomy
from catalog_ranker.models.product import TagCategory
from catalog_ranker.models.ranking import Algorithm, RelatedStrategy


class TestRankingEngine:
    def test_search(self, catalog):
        results = RankingEngine().search("resident evil", catalog, exclude_ids=["re4"])
        assert [r.product.product_id for r in results.exact_matches] == ["re2", "village"]

    def test_related_uses_injected_taxonomy(self, catalog, by_id):
        weights = dict(DEFAULT_CATEGORY_WEIGHTS)
        weights[TagCategory.DEVELOPER] = 0
        engine = RankingEngine(Taxonomy(category_weights=weights))
        related = engine.related_items(by_id["re4"], catalog)
        assert related.products[0].score == 175
        assert RankingEngine().related_items(by_id["re4"], catalog).products[0].score == 215

    def test_strategies(self, catalog, by_id):
        engine = RankingEngine()
        for strategy in RelatedStrategy:
            related = engine.related_items(by_id["re2"], catalog, max_results=3, strategy=strategy)
            assert 0 < len(related.products) <= 3
            assert related.algorithm in set(Algorithm)

    def test_build_graph(self, catalog, by_id):
        KG = RankingEngine().build_graph(catalog, by_id["re4"])
        assert KG.has_node(product_node("re4"))
        assert KG.has_node(product_node("mouse"))

    def test_token_search(self, catalog):
        results = RankingEngine().token_search("resident evil 4", catalog, exclude_ids=["re2"])
        ids = [r.product.product_id for r in results.all_results]
        assert ids[0] == "re4"
        assert "re2" not in ids
