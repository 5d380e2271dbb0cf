from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Iterable, List, Optional, Set, Tuple

import networkx as nx

from catalog_ranker.core.explain import build_explanation
from catalog_ranker.core.kg_builder import build_kg, product_bucket, products_in_bucket, shared_tag_ids
from catalog_ranker.core.ordering import order_results, popularity_sort_key
from catalog_ranker.core.search import search
from catalog_ranker.core.taxonomy import DEFAULT_TAXONOMY, Taxonomy
from catalog_ranker.core.token_compat import rank_by_name_tokens
from catalog_ranker.models.product import Product, Tag, TagCategory
from catalog_ranker.models.ranking import Algorithm, RankedResult, RelatedItems, RelatedStrategy
from catalog_ranker.utils.exceptions import InvalidArgumentError
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)

MIN_RELEVANCE_SCORE = 50
MIN_RESULTS = 3
DEFAULT_MAX_RESULTS = 8
POPULAR_TAG_COUNT = 5

SAME_DEVELOPER_BOOST = 20
POPULAR_ITEM_BOOST = 10
FREQUENTLY_BOUGHT_TOGETHER_BOOST = 50
RECENT_RELEASE_BOOST = 15


@dataclass(frozen=True)
class ContextSignals:
    """Optional outside signals for the contextual boosts, keyed by candidate product id."""

    frequently_bought_together: FrozenSet[str] = frozenset()
    recent_releases: FrozenSet[str] = frozenset()


NO_SIGNALS = ContextSignals()


def valid_candidates(focal: Product, catalog: Iterable[Product]) -> List[Product]:
    """Catalog minus the focal product, masters, inactive items and repeated ids."""
    seen: Set[str] = {focal.product_id}
    out: List[Product] = []
    for p in catalog:
        if p.product_id in seen or p.is_master or not p.active:
            continue
        seen.add(p.product_id)
        out.append(p)
    return out


def weighted_tag_score(
    KG: nx.Graph,
    focal: Product,
    candidate: Product,
    taxonomy: Taxonomy,
) -> Tuple[int, List[Tag]]:
    focal_tags = {t.tag_id: t for t in focal.tags}
    shared = [focal_tags[tid] for tid in shared_tag_ids(KG, focal.product_id, candidate.product_id)]
    return sum(taxonomy.weight_of(t) for t in shared), shared


def contextual_boosts(
    candidate: Product,
    shared: List[Tag],
    taxonomy: Taxonomy,
    signals: ContextSignals,
) -> Tuple[int, List[str]]:
    boost = 0
    reasons: List[str] = []
    if any(taxonomy.category_of(t) == TagCategory.DEVELOPER for t in shared):
        boost += SAME_DEVELOPER_BOOST
        reasons.append("same_developer")
    if candidate.tag_count >= POPULAR_TAG_COUNT:
        boost += POPULAR_ITEM_BOOST
        reasons.append("popular_item")
    if candidate.product_id in signals.frequently_bought_together:
        boost += FREQUENTLY_BOUGHT_TOGETHER_BOOST
        reasons.append("frequently_bought_together")
    if candidate.product_id in signals.recent_releases:
        boost += RECENT_RELEASE_BOOST
        reasons.append("recent_release")
    return boost, reasons


def score_candidate(
    KG: nx.Graph,
    focal: Product,
    candidate: Product,
    taxonomy: Taxonomy,
    signals: ContextSignals,
) -> RankedResult:
    base, shared = weighted_tag_score(KG, focal, candidate, taxonomy)
    boost, boost_reasons = contextual_boosts(candidate, shared, taxonomy, signals)

    reasons: List[str] = []
    for t in shared:
        rule = f"shared_{taxonomy.category_of(t).value.lower()}"
        if rule not in reasons:
            reasons.append(rule)
    reasons.extend(boost_reasons)

    matched = [t.name for t in shared]
    return RankedResult(
        product=candidate,
        score=float(base + boost),
        matched_tags=matched,
        algorithm=Algorithm.WEIGHTED_TAGS,
        reasons=reasons,
        explanation=build_explanation(reasons, matched),
        breakdown={"base_score": base, "boost": boost},
    )


def _as_fallback(result: RankedResult, algorithm: Algorithm) -> RankedResult:
    reasons = result.reasons + [algorithm.value]
    return replace(
        result,
        algorithm=algorithm,
        reasons=reasons,
        explanation=build_explanation(reasons, result.matched_tags),
    )


def _fill(
    selected: List[RankedResult],
    pool: List[RankedResult],
    target: int,
    algorithm: Algorithm,
    used: Set[str],
) -> int:
    """Append unused pool entries until ``target`` is reached; returns how many were added."""
    added = 0
    for entry in pool:
        if len(selected) >= target:
            break
        if entry.product.product_id in used:
            continue
        used.add(entry.product.product_id)
        selected.append(_as_fallback(entry, algorithm))
        added += 1
    return added


def _unscored(products: Iterable[Product], algorithm: Algorithm) -> List[RankedResult]:
    return [RankedResult(product=p, score=0.0, matched_tags=[], algorithm=algorithm) for p in products]


def rank_weighted_tags(
    focal: Product,
    valid: List[Product],
    max_results: int,
    taxonomy: Taxonomy,
    signals: ContextSignals,
) -> RelatedItems:
    KG = build_kg(valid, taxonomy, focal)
    focal_bucket = product_bucket(KG, focal.product_id)
    in_bucket = set(products_in_bucket(KG, focal_bucket))
    same_category = [p for p in valid if p.product_id in in_bucket]
    logger.debug(f"Focal bucket {focal_bucket.value}: {len(same_category)} of {len(valid)} candidates")

    scored = order_results(
        (score_candidate(KG, focal, p, taxonomy, signals) for p in same_category),
        prefer_tag_rich=True,
    )
    relevant = [r for r in scored if r.score >= MIN_RELEVANCE_SCORE]

    selected = relevant[:max_results]
    used: Set[str] = {r.product.product_id for r in selected}
    used.add(focal.product_id)
    algorithm = Algorithm.WEIGHTED_TAGS

    target = min(MIN_RESULTS, max_results)
    if len(selected) < target:
        if _fill(selected, scored, target, Algorithm.CATEGORY_FALLBACK, used):
            algorithm = Algorithm.CATEGORY_FALLBACK
    if len(selected) < target:
        popular = sorted(_unscored(valid, Algorithm.POPULAR_FALLBACK), key=popularity_sort_key)
        if _fill(selected, popular, target, Algorithm.POPULAR_FALLBACK, used):
            algorithm = Algorithm.POPULAR_FALLBACK

    return RelatedItems(
        products=selected,
        algorithm=algorithm,
        debug={
            "total_candidates": len(valid),
            "after_category_filter": len(same_category),
            "after_relevance_filter": len(relevant),
            "min_score_threshold": MIN_RELEVANCE_SCORE,
        },
    )


def _rank_by_query(
    focal: Product,
    valid: List[Product],
    max_results: int,
    run: Callable[[Product, List[Product]], List[RankedResult]],
    algorithm: Algorithm,
) -> RelatedItems:
    found = order_results(run(focal, valid))
    selected = [replace(r, algorithm=algorithm) for r in found[:max_results]]
    used: Set[str] = {r.product.product_id for r in selected}
    used.add(focal.product_id)

    if len(selected) < MIN_RESULTS:
        rest = sorted(_unscored(valid, Algorithm.FALLBACK), key=popularity_sort_key)
        if _fill(selected, rest, max_results, Algorithm.FALLBACK, used):
            algorithm = Algorithm.FALLBACK

    return RelatedItems(
        products=selected,
        algorithm=algorithm,
        debug={"total_candidates": len(valid), "query_matches": len(found)},
    )


def _search_based(focal: Product, products: List[Product]) -> List[RankedResult]:
    return search(focal.name, products).all_results


def _token_based(focal: Product, products: List[Product]) -> List[RankedResult]:
    return rank_by_name_tokens(focal, products)


def related_items(
    focal: Product,
    catalog: Iterable[Product],
    max_results: int = DEFAULT_MAX_RESULTS,
    strategy: RelatedStrategy = RelatedStrategy.WEIGHTED_TAGS,
    taxonomy: Optional[Taxonomy] = None,
    signals: Optional[ContextSignals] = None,
) -> RelatedItems:
    """Products related to ``focal``, never including ``focal`` itself.

    The weighted-tags strategy scores shared tag identities inside the focal
    product's category bucket and relaxes to the rest of the bucket, then to
    the whole catalog, when fewer than ``MIN_RESULTS`` items qualify. The
    search- and token-based strategies rank the catalog against the focal
    product's name.
    """
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results <= 0:
        raise InvalidArgumentError(f"max_results must be a positive integer, got {max_results!r}")
    try:
        strategy = RelatedStrategy(strategy)
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown related-items strategy: {strategy!r}") from e

    taxonomy = taxonomy or DEFAULT_TAXONOMY
    signals = signals or NO_SIGNALS
    valid = valid_candidates(focal, catalog)

    if strategy == RelatedStrategy.WEIGHTED_TAGS:
        result = rank_weighted_tags(focal, valid, max_results, taxonomy, signals)
    elif strategy == RelatedStrategy.SEARCH_BASED:
        result = _rank_by_query(focal, valid, max_results, _search_based, Algorithm.SEARCH_BASED)
    else:
        result = _rank_by_query(focal, valid, max_results, _token_based, Algorithm.TOKEN_BASED)

    logger.info(
        f"Related items for {focal.product_id!r} ({strategy.value}): "
        f"{len(result.products)} products via {result.algorithm.value}"
    )
    return result
