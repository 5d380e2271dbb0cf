"""Token-level compatibility between a query and a tag name.

Scores each tag by the share of query tokens it covers and adjusts for roman
numerals, abbreviations, descriptive filler words and numbers. A tag whose only
overlap with the query is a number ("far cry 6" vs "Street Fighter 6") is
rejected outright.

The title overlap scoring used for token-based related items lives here too.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from catalog_ranker.core.explain import build_explanation
from catalog_ranker.core.normalize import normalize, tokenize
from catalog_ranker.core.search import (
    CATEGORY_HIT_SCORE,
    NAME_HIT_SCORE,
    TAG_SCORE_PER_WEIGHT,
    WHOLE_QUERY_BONUS,
    partition,
    searchable_products,
)
from catalog_ranker.core.similarity import positional_similarity
from catalog_ranker.models.product import Product
from catalog_ranker.models.ranking import Algorithm, RankedResult, SearchResults
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)

SYNONYMS: Dict[str, List[str]] = {
    "cod": ["call", "of", "duty"],
    "gta": ["grand", "theft", "auto"],
    "mw": ["modern", "warfare"],
    "bo": ["black", "ops"],
    "bf": ["battlefield"],
    "ps": ["playstation"],
    "pc": ["computer", "pc"],
}

ROMAN_TO_ARABIC: Dict[str, str] = {
    "i": "1", "ii": "2", "iii": "3", "iv": "4", "v": "5", "vi": "6",
    "vii": "7", "viii": "8", "ix": "9", "x": "10", "xi": "11", "xii": "12",
}

DESCRIPTIVE_WORDS = frozenset({
    "ultimate", "edition", "deluxe", "gold", "premium", "special",
    "complete", "definitive", "enhanced", "remastered", "collection",
    "bundle", "pack", "set", "version", "release",
})

SYNONYM_SIMILARITY = 0.9
FUZZY_SIMILARITY_FLOOR = 0.7
MATCH_THRESHOLD = 0.8

PERFECT_MATCH_BONUS = 15
NUMBERS_MATCH_BONUS = 20
NUMBERS_PARTIAL_PENALTY = 25
NUMBERS_MISMATCH_PENALTY = 50
ESSENTIAL_MATCH_BONUS = 3
DESCRIPTIVE_MISS_PENALTY = 2


class TokenType(str, Enum):
    MAIN = "main"
    DESCRIPTIVE = "descriptive"
    NUMERIC = "numeric"
    ROMAN = "roman"


TOKEN_TYPE_WEIGHTS = {
    TokenType.MAIN: 1.0,
    TokenType.NUMERIC: 1.5,
    TokenType.ROMAN: 1.5,
    TokenType.DESCRIPTIVE: 0.3,
}


@dataclass
class TokenInfo:
    token: str
    type: TokenType
    weight: float

    @property
    def is_essential(self) -> bool:
        return self.type != TokenType.DESCRIPTIVE

    @property
    def is_number(self) -> bool:
        return self.type in (TokenType.NUMERIC, TokenType.ROMAN)


@dataclass
class TokenMatch:
    query_token: str
    tag_token: str
    match_type: str  # exact | partial | numeric | roman_numeral
    similarity: float


@dataclass
class CompatibilityResult:
    query_tokens: List[str]
    tag_tokens: List[str]
    matches: List[TokenMatch] = field(default_factory=list)
    compatibility_ratio: float = 0.0
    raw_score: float = 0.0
    bonus: float = 0.0
    final_score: float = 0.0
    rejected_numeric_only: bool = False


def detect_token_type(token: str) -> TokenType:
    if token.isdigit():
        return TokenType.NUMERIC
    if token in ROMAN_TO_ARABIC:
        return TokenType.ROMAN
    if token in DESCRIPTIVE_WORDS:
        return TokenType.DESCRIPTIVE
    return TokenType.MAIN


def analyze_tokens(text: str) -> List[TokenInfo]:
    # single characters are kept here, numbers like "4" matter
    out = []
    for token in normalize(text).split():
        kind = detect_token_type(token)
        out.append(TokenInfo(token=token, type=kind, weight=TOKEN_TYPE_WEIGHTS[kind]))
    return out


def token_similarity(a: str, b: str) -> float:
    a, b = normalize(a), normalize(b)
    if a == b:
        return 1.0
    if ROMAN_TO_ARABIC.get(a, a) == ROMAN_TO_ARABIC.get(b, b):
        return 1.0
    if a and b and (a in b or b in a):
        return min(len(a), len(b)) / max(len(a), len(b))

    expanded_a = [a] + SYNONYMS.get(a, [])
    expanded_b = [b] + SYNONYMS.get(b, [])
    if any(x == y for x in expanded_a for y in expanded_b):
        return SYNONYM_SIMILARITY

    sim = positional_similarity(a, b)
    return sim if sim > FUZZY_SIMILARITY_FLOOR else 0.0


def _match_type(query: TokenInfo, tag: TokenInfo, similarity: float) -> str:
    if similarity < 1.0:
        return "partial"
    if query.type == TokenType.NUMERIC and tag.type == TokenType.NUMERIC:
        return "numeric"
    if query.type == TokenType.ROMAN or tag.type == TokenType.ROMAN:
        return "roman_numeral"
    return "exact"


def find_best_token_match(query: TokenInfo, tag_tokens: List[TokenInfo]) -> Optional[TokenMatch]:
    best: Optional[TokenMatch] = None
    for tag in tag_tokens:
        sim = token_similarity(query.token, tag.token)
        if sim >= MATCH_THRESHOLD and (best is None or sim > best.similarity):
            best = TokenMatch(query.token, tag.token, _match_type(query, tag, sim), sim)
    return best


def special_bonus(matches: List[TokenMatch], query: List[TokenInfo], tag: List[TokenInfo]) -> float:
    by_token = {t.token: t for t in query}
    bonus = 0.0

    if matches and len(matches) == len(query) and all(m.similarity == 1.0 for m in matches):
        bonus += PERFECT_MATCH_BONUS

    query_numbers = [t for t in query if t.is_number]
    tag_numbers = [t for t in tag if t.is_number]
    if query_numbers and tag_numbers:
        numeric_matches = [
            m for m in matches if m.match_type in ("numeric", "roman_numeral") and m.similarity == 1.0
        ]
        if not numeric_matches:
            bonus -= NUMBERS_MISMATCH_PENALTY
        elif len(numeric_matches) < len(query_numbers):
            bonus -= NUMBERS_PARTIAL_PENALTY
        else:
            bonus += NUMBERS_MATCH_BONUS

    bonus += ESSENTIAL_MATCH_BONUS * sum(
        1 for m in matches if by_token.get(m.query_token) and by_token[m.query_token].is_essential
    )

    descriptive = [t for t in query if t.type == TokenType.DESCRIPTIVE]
    if descriptive:
        found = sum(
            1 for m in matches
            if by_token.get(m.query_token) and by_token[m.query_token].type == TokenType.DESCRIPTIVE
        )
        bonus -= DESCRIPTIVE_MISS_PENALTY * (len(descriptive) - found)

    return bonus


def token_compatibility(query: str, tag_name: str, tag_weight: int) -> CompatibilityResult:
    query_tokens = analyze_tokens(query)
    tag_tokens = analyze_tokens(tag_name)
    result = CompatibilityResult(
        query_tokens=[t.token for t in query_tokens],
        tag_tokens=[t.token for t in tag_tokens],
    )
    if not query_tokens or not tag_tokens:
        return result

    matches = [m for m in (find_best_token_match(q, tag_tokens) for q in query_tokens) if m is not None]
    result.matches = matches
    result.compatibility_ratio = len(matches) / max(len(query_tokens), len(tag_tokens))
    result.raw_score = TAG_SCORE_PER_WEIGHT * tag_weight * result.compatibility_ratio
    result.bonus = special_bonus(matches, query_tokens, tag_tokens)

    if matches:
        query_types = {t.token: t for t in query_tokens}
        tag_types = {t.token: t for t in tag_tokens}
        only_numbers = all(query_types[m.query_token].is_number and tag_types[m.tag_token].is_number for m in matches)
        has_words = any(not t.is_number for t in query_tokens)
        result.rejected_numeric_only = only_numbers and has_words

    if result.rejected_numeric_only:
        result.final_score = 0.0
    else:
        result.final_score = max(0.0, result.raw_score + result.bonus)
    return result


def search_by_token_compatibility(
    query: str,
    catalog: Iterable[Product],
    exclude_ids: Iterable[str] = (),
) -> SearchResults:
    query_tokens = [t.token for t in analyze_tokens(query)]
    if not query_tokens:
        return SearchResults()

    normalized_query = normalize(query)
    scored: List[RankedResult] = []
    for product in searchable_products(catalog, exclude_ids):
        tag_score = 0.0
        matched: List[str] = []
        for tag in product.tags:
            compat = token_compatibility(query, tag.name, tag.weight)
            if compat.final_score > 0:
                tag_score += compat.final_score
                matched.append(tag.name)

        norm_name = normalize(product.name)
        norm_category = normalize(product.category)
        name_hits = sum(1 for t in query_tokens if t in norm_name)
        category_hits = sum(1 for t in query_tokens if t in norm_category)
        whole_query = normalized_query in norm_name or normalized_query in norm_category

        name_score = name_hits * NAME_HIT_SCORE
        category_score = category_hits * CATEGORY_HIT_SCORE
        exact_bonus = WHOLE_QUERY_BONUS if whole_query else 0
        total = tag_score + name_score + category_score + exact_bonus
        if total <= 0:
            continue

        reasons = []
        if matched:
            reasons.append("token_match")
        if name_hits:
            reasons.append("name_match")
        if category_hits:
            reasons.append("category_match")
        if whole_query:
            reasons.append("whole_query_match")

        scored.append(RankedResult(
            product=product,
            score=total,
            matched_tags=matched,
            algorithm=Algorithm.TOKEN_BASED,
            reasons=reasons,
            explanation=build_explanation(reasons, matched),
            breakdown={
                "name_score": name_score,
                "tag_score": tag_score,
                "category_score": category_score,
                "exact_bonus": exact_bonus,
            },
        ))

    results = partition(scored, query_tokens)
    logger.info(
        f"Token search {query!r}: {len(results.exact_matches)} exact, {len(results.related_products)} related"
    )
    return results


NAME_EXACT_TOKEN_SCORE = 10
NAME_PARTIAL_TOKEN_SCORE = 5
NAME_MATCH_RATIO_FLOOR = 0.5
NAME_MATCH_RATIO_BONUS = 10
TAG_OVERLAP_FACTOR = 0.3
SAME_CATEGORY_BONUS = 5
MIN_NAME_TOKEN_SCORE = 10


def name_token_overlap(query: str, target: str) -> float:
    """Pairwise token overlap between two titles.

    Every query/target token pair scores 10 when equal and 5 when one contains
    the other (counting as half a match). When the matches cover more than half
    of the longer token list, ``ratio * 10`` is added.
    """
    query_tokens, target_tokens = tokenize(query), tokenize(target)
    if not query_tokens or not target_tokens:
        return 0.0

    matches = 0.0
    score = 0.0
    for q in query_tokens:
        for t in target_tokens:
            if q == t:
                matches += 1
                score += NAME_EXACT_TOKEN_SCORE
            elif q in t or t in q:
                matches += 0.5
                score += NAME_PARTIAL_TOKEN_SCORE

    ratio = matches / max(len(query_tokens), len(target_tokens))
    if ratio > NAME_MATCH_RATIO_FLOOR:
        score += ratio * NAME_MATCH_RATIO_BONUS
    return score


def rank_by_name_tokens(focal: Product, candidates: Iterable[Product]) -> List[RankedResult]:
    """Candidates whose titles share tokens with the focal product's title.

    Adds 0.3 times the best single tag overlap and 5 for the same store
    category. Candidates below ``MIN_NAME_TOKEN_SCORE`` are dropped.
    """
    query = normalize(focal.name)
    out: List[RankedResult] = []
    for product in candidates:
        name_score = name_token_overlap(query, product.name)

        best_tag, best_overlap = None, 0.0
        for tag in product.tags:
            overlap = name_token_overlap(query, tag.name)
            if overlap > best_overlap:
                best_tag, best_overlap = tag, overlap
        tag_score = best_overlap * TAG_OVERLAP_FACTOR

        same_category = bool(focal.category) and product.category == focal.category
        category_score = SAME_CATEGORY_BONUS if same_category else 0

        total = name_score + tag_score + category_score
        if total < MIN_NAME_TOKEN_SCORE:
            continue

        matched = [best_tag.name] if best_tag is not None else []
        reasons = []
        if name_score:
            reasons.append("name_match")
        if tag_score:
            reasons.append("token_match")
        if same_category:
            reasons.append("same_category")

        out.append(RankedResult(
            product=product,
            score=total,
            matched_tags=matched,
            algorithm=Algorithm.TOKEN_BASED,
            reasons=reasons,
            explanation=build_explanation(reasons, matched),
            breakdown={"name_score": name_score, "tag_score": tag_score, "category_score": category_score},
        ))

    logger.debug(f"Name-token ranking for {focal.product_id!r}: {len(out)} candidates")
    return out
