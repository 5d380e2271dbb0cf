from typing import Callable, Iterable, List, Optional, Set, Tuple

from catalog_ranker.core.explain import build_explanation
from catalog_ranker.core.normalize import normalize, tokenize
from catalog_ranker.core.ordering import order_results
from catalog_ranker.core.similarity import is_containment, suggestion_similarity, tag_similarity
from catalog_ranker.models.product import Product, Tag
from catalog_ranker.models.ranking import Algorithm, RankedResult, SearchResults
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)

EXACT_MATCH_THRESHOLD = 20
PARTIAL_SIMILARITY_THRESHOLD = 0.7
TAG_SCORE_PER_WEIGHT = 10
NAME_HIT_SCORE = 15
CATEGORY_HIT_SCORE = 5
WHOLE_QUERY_BONUS = 25

SUGGESTION_MIN_SIMILARITY = 0.5
SUGGESTION_MAX_SIMILARITY = 0.9
SUGGESTIONS_PER_TOKEN = 3

SimilarityFn = Callable[[str, str], float]


def searchable_products(catalog: Iterable[Product], exclude_ids: Iterable[str] = ()) -> List[Product]:
    """Active, non-master products, first occurrence of each id only."""
    seen: Set[str] = set(exclude_ids)
    out: List[Product] = []
    for p in catalog:
        if p.product_id in seen or p.is_master or not p.active:
            continue
        seen.add(p.product_id)
        out.append(p)
    return out


def best_tag_match(
    token: str,
    normalized_tags: List[Tuple[Tag, str]],
    used_tag_ids: Set[str],
    similarity: SimilarityFn = tag_similarity,
) -> Optional[Tuple[Tag, float, str]]:
    """Best unused tag for one token, as (tag, similarity, "exact" | "partial")."""
    best: Optional[Tuple[Tag, float, str]] = None
    for tag, norm in normalized_tags:
        if tag.tag_id in used_tag_ids:
            continue
        sim = similarity(token, norm)
        if sim <= 0:
            continue
        if sim == 1.0 or is_containment(token, norm):
            kind = "exact"
        elif sim > PARTIAL_SIMILARITY_THRESHOLD:
            kind = "partial"
        else:
            continue
        if best is None or (sim, kind == "exact") > (best[1], best[2] == "exact"):
            best = (tag, sim, kind)
    return best


def score_product(
    product: Product,
    tokens: List[str],
    normalized_query: str,
    similarity: SimilarityFn = tag_similarity,
) -> Optional[RankedResult]:
    normalized_tags = [(tag, normalize(tag.name)) for tag in product.tags]

    used: Set[str] = set()
    matched_tags: List[str] = []
    exact_count = 0
    partial_count = 0
    tag_score = 0
    for token in tokens:
        match = best_tag_match(token, normalized_tags, used, similarity)
        if match is None:
            continue
        tag, _, kind = match
        used.add(tag.tag_id)
        matched_tags.append(tag.name)
        tag_score += TAG_SCORE_PER_WEIGHT * tag.weight
        if kind == "exact":
            exact_count += 1
        else:
            partial_count += 1

    if not used:
        return None

    norm_name = normalize(product.name)
    norm_category = normalize(product.category)
    name_hits = sum(1 for t in tokens if t in norm_name)
    category_hits = sum(1 for t in tokens if t in norm_category)
    whole_query = bool(normalized_query) and (normalized_query in norm_name or normalized_query in norm_category)

    name_score = name_hits * NAME_HIT_SCORE
    category_score = category_hits * CATEGORY_HIT_SCORE
    exact_bonus = WHOLE_QUERY_BONUS if whole_query else 0
    total = name_score + tag_score + category_score + exact_bonus

    reasons = ["tag_match"]
    if name_hits:
        reasons.append("name_match")
    if category_hits:
        reasons.append("category_match")
    if whole_query:
        reasons.append("whole_query_match")

    return RankedResult(
        product=product,
        score=float(total),
        matched_tags=matched_tags,
        algorithm=Algorithm.SEARCH,
        reasons=reasons,
        explanation=build_explanation(reasons, matched_tags),
        breakdown={
            "name_score": name_score,
            "tag_score": tag_score,
            "category_score": category_score,
            "exact_bonus": exact_bonus,
            "exact_tag_matches": exact_count,
            "partial_tag_matches": partial_count,
        },
    )


def tag_suggestions(tokens: List[str], tag_names: Iterable[str]) -> List[str]:
    """Normalized catalog tags close to a query token without matching it.

    At most ``SUGGESTIONS_PER_TOKEN`` per token, taken in alphabetical order.
    """
    names = sorted({n for n in tag_names if n})
    picked: Set[str] = set()
    for token in tokens:
        close = [
            n for n in names
            if SUGGESTION_MIN_SIMILARITY < suggestion_similarity(token, n) < SUGGESTION_MAX_SIMILARITY
        ]
        picked.update(close[:SUGGESTIONS_PER_TOKEN])
    return sorted(picked)


def partition(results: Iterable[RankedResult], tokens: List[str]) -> SearchResults:
    exact = [r for r in results if r.score >= EXACT_MATCH_THRESHOLD]
    related = [r for r in results if 0 < r.score < EXACT_MATCH_THRESHOLD]
    return SearchResults(
        exact_matches=order_results(exact),
        related_products=order_results(related),
        tokens=tokens,
    )


def search(
    query: str,
    catalog: Iterable[Product],
    exclude_ids: Iterable[str] = (),
    similarity: SimilarityFn = tag_similarity,
) -> SearchResults:
    """Match a free-text query against product tags, names and categories.

    Products need at least one matching tag to be candidates. Candidates
    scoring ``EXACT_MATCH_THRESHOLD`` or more are exact matches, the rest are
    related suggestions.
    """
    tokens = tokenize(query)
    if not tokens:
        logger.debug(f"Query {query!r} has no usable tokens")
        return SearchResults()

    normalized_query = normalize(query)
    products = searchable_products(catalog, exclude_ids)
    scored: List[RankedResult] = []
    for product in products:
        result = score_product(product, tokens, normalized_query, similarity)
        if result is not None:
            scored.append(result)

    results = partition(scored, tokens)
    results.tag_suggestions = tag_suggestions(tokens, (normalize(t.name) for p in products for t in p.tags))
    logger.info(
        f"Search {query!r}: {len(results.exact_matches)} exact, "
        f"{len(results.related_products)} related, {len(results.tag_suggestions)} suggestions (tokens={tokens})"
    )
    return results
