"""Related-items ranking tests"""
import pytest

from catalog_ranker.core.related import (
    MIN_RELEVANCE_SCORE,
    ContextSignals,
    related_items,
    valid_candidates,
)
from catalog_ranker.core.taxonomy import Taxonomy
from catalog_ranker.models.product import Product, TagCategory
from catalog_ranker.models.ranking import Algorithm, RelatedStrategy
from catalog_ranker.utils.exceptions import InvalidArgumentError
from tests.conftest import make_product

RE = ("resident-evil", "Resident Evil", "FRANCHISE", 5)
SH = ("survival-horror", "Survival Horror", "GENRE", 3)
CAPCOM = ("capcom", "Capcom", "DEVELOPER", 4)


def _ids(related):
    return [r.product.product_id for r in related.products]


class TestWeightedTags:
    """Default strategy"""

    def test_same_franchise_first(self, catalog, by_id):
        related = related_items(by_id["re4"], catalog)
        assert _ids(related) == ["re2", "village", "dead-space"]
        assert [r.score for r in related.products] == [215, 215, 55]
        assert related.algorithm == Algorithm.WEIGHTED_TAGS
        assert related.debug == {
            "total_candidates": 6,
            "after_category_filter": 4,
            "after_relevance_filter": 3,
            "min_score_threshold": MIN_RELEVANCE_SCORE,
        }

    def test_reasons_and_breakdown(self, catalog, by_id):
        top = related_items(by_id["re4"], catalog).products[0]
        assert top.breakdown == {"base_score": 195, "boost": 20}
        assert top.reasons == [
            "shared_franchise", "shared_genre", "shared_developer", "shared_generic", "same_developer",
        ]
        assert top.matched_tags == ["Resident Evil", "Survival Horror", "Capcom", "Jogo"]
        assert "Made by the same developer." in top.explanation

    def test_developer_boost_and_genre_only_candidate(self):
        p1 = make_product("p1", "P1", [RE, SH, CAPCOM])
        p2 = make_product("p2", "P2", [RE, SH, CAPCOM])
        p3 = make_product("p3", "P3", [SH])
        related = related_items(p1, [p1, p3, p2])
        assert _ids(related) == ["p2", "p3"]
        assert [r.score for r in related.products] == [210, 50]
        assert related.algorithm == Algorithm.WEIGHTED_TAGS

    def test_master_focal(self, catalog, by_id):
        related = related_items(by_id["re-master"], catalog)
        assert _ids(related) == ["re2", "village", "re4"]
        assert {r.score for r in related.products} == {105}

    def test_max_results_caps_output(self, catalog, by_id):
        related = related_items(by_id["re4"], catalog, max_results=1)
        assert _ids(related) == ["re2"]
        assert related.algorithm == Algorithm.WEIGHTED_TAGS

    def test_popular_boost(self):
        tags = [(f"t{i}", f"Jogo {i}", "GENERIC", 1) for i in range(5)]
        focal = make_product("f", "Focal", tags[:1] + [RE])
        rich = make_product("rich", "Rich", tags + [RE])
        [hit] = related_items(focal, [focal, rich]).products
        assert "popular_item" in hit.reasons
        assert hit.score == 5 + 100 + 10


class TestContextSignals:
    def test_frequently_bought_together(self, catalog, by_id):
        signals = ContextSignals(frequently_bought_together=frozenset({"dead-space"}))
        related = related_items(by_id["re4"], catalog, signals=signals)
        dead_space = related.products[2]
        assert dead_space.product.product_id == "dead-space"
        assert dead_space.score == 105
        assert "frequently_bought_together" in dead_space.reasons

    def test_recent_release_alone_stays_below_threshold(self, catalog, by_id):
        signals = ContextSignals(recent_releases=frozenset({"fifa-24"}))
        assert "fifa-24" not in _ids(related_items(by_id["re4"], catalog, signals=signals))


class TestFallbacks:
    """Cascade when too few candidates clear the threshold"""

    def test_category_fallback(self, catalog, by_id):
        related = related_items(by_id["fifa-24"], catalog)
        assert _ids(related) == ["dead-space", "re2", "village"]
        assert [r.score for r in related.products] == [25, 5, 5]
        assert related.algorithm == Algorithm.CATEGORY_FALLBACK
        assert all(r.algorithm == Algorithm.CATEGORY_FALLBACK for r in related.products)
        assert "category_fallback" in related.products[0].reasons

    def test_popular_fallback_for_tagless_focal(self, catalog):
        focal = make_product("gift", "Gift Card")
        related = related_items(focal, catalog)
        assert _ids(related) == ["re2", "village", "re4"]
        assert all(r.score == 0 for r in related.products)
        assert related.algorithm == Algorithm.POPULAR_FALLBACK

    def test_popular_fallback_for_lonely_bucket(self, catalog, by_id):
        related = related_items(by_id["mouse"], catalog)
        assert _ids(related) == ["re2", "village", "re4"]
        assert related.algorithm == Algorithm.POPULAR_FALLBACK
        assert related.debug["after_category_filter"] == 0

    def test_fallback_respects_max_results(self, catalog, by_id):
        related = related_items(by_id["mouse"], catalog, max_results=2)
        assert _ids(related) == ["re2", "village"]

    def test_nothing_to_return(self):
        focal = make_product("only", "Only", [RE])
        related = related_items(focal, [focal])
        assert related.products == []
        assert related.algorithm == Algorithm.WEIGHTED_TAGS


class TestInvariants:
    def test_focal_never_returned(self, catalog, by_id):
        for strategy in RelatedStrategy:
            for pid in ("re4", "mouse", "pantufa"):
                ids = _ids(related_items(by_id[pid], catalog, strategy=strategy))
                assert pid not in ids

    def test_no_duplicates_masters_or_inactive(self, catalog, by_id):
        duplicated = catalog + [Product.from_dict({"id": "re2", "name": "Resident Evil 2 Remake"})]
        for strategy in RelatedStrategy:
            ids = _ids(related_items(by_id["mouse"], duplicated, max_results=8, strategy=strategy))
            assert len(ids) == len(set(ids))
            assert "re-master" not in ids
            assert "re0" not in ids

    def test_deterministic(self, catalog, by_id):
        first = _ids(related_items(by_id["re4"], catalog))
        again = _ids(related_items(by_id["re4"], list(reversed(catalog))))
        assert first == again

    def test_valid_candidates(self, catalog, by_id):
        ids = [p.product_id for p in valid_candidates(by_id["re4"], catalog)]
        assert ids == ["re2", "village", "dead-space", "fifa-24", "pantufa", "mouse"]


class TestArguments:
    @pytest.mark.parametrize("max_results", [0, -1, True, 2.5, "3", None])
    def test_invalid_max_results(self, catalog, by_id, max_results):
        with pytest.raises(InvalidArgumentError):
            related_items(by_id["re4"], catalog, max_results=max_results)

    def test_unknown_strategy(self, catalog, by_id):
        with pytest.raises(InvalidArgumentError):
            related_items(by_id["re4"], catalog, strategy="random")

    def test_strategy_by_name(self, catalog, by_id):
        assert related_items(by_id["re4"], catalog, strategy="search_based").products

    def test_custom_taxonomy(self, catalog, by_id):
        taxonomy = Taxonomy(category_weights={TagCategory.FRANCHISE: 100})
        related = related_items(by_id["re4"], catalog, taxonomy=taxonomy)
        assert related.products[0].score == 120


class TestQueryStrategies:
    def test_search_based(self, catalog, by_id):
        related = related_items(by_id["re4"], catalog, strategy=RelatedStrategy.SEARCH_BASED)
        assert _ids(related) == ["re2", "village", "fifa-24", "dead-space", "pantufa", "mouse"]
        assert [r.score for r in related.products[:2]] == [95, 80]
        assert related.products[0].algorithm == Algorithm.SEARCH_BASED
        assert related.products[2].algorithm == Algorithm.FALLBACK
        assert related.algorithm == Algorithm.FALLBACK
        assert related.debug == {"total_candidates": 6, "query_matches": 2}

    def test_token_based(self, catalog, by_id):
        related = related_items(by_id["re4"], catalog, strategy=RelatedStrategy.TOKEN_BASED)
        assert _ids(related) == ["re2", "village", "dead-space", "fifa-24"]
        assert [r.score for r in related.products] == pytest.approx([48.5, 31, 15, 15])
        assert related.products[0].breakdown["name_score"] == pytest.approx(37.5)
        assert related.products[0].matched_tags == ["Resident Evil"]
        assert related.debug == {"total_candidates": 6, "query_matches": 4}

    def test_token_based_cut(self, catalog, by_id):
        related = related_items(by_id["re4"], catalog, strategy=RelatedStrategy.TOKEN_BASED, max_results=2)
        assert _ids(related) == ["re2", "village"]
        assert related.algorithm == Algorithm.TOKEN_BASED
        assert all(r.algorithm == Algorithm.TOKEN_BASED for r in related.products)

    def test_token_based_falls_back_without_title_overlap(self, catalog, by_id):
        related = related_items(by_id["pantufa"], catalog, strategy=RelatedStrategy.TOKEN_BASED)
        assert related.debug["query_matches"] == 0
        assert related.algorithm == Algorithm.FALLBACK
        assert all(r.score == 0 for r in related.products)
