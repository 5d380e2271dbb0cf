from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from catalog_ranker.models.product import Product


class Algorithm(str, Enum):
    """Which strategy or fallback tier produced a ranked entry."""

    SEARCH = "search"
    WEIGHTED_TAGS = "weighted_tags"
    CATEGORY_FALLBACK = "category_fallback"
    POPULAR_FALLBACK = "popular_fallback"
    SEARCH_BASED = "search_based"
    TOKEN_BASED = "token_based"
    FALLBACK = "fallback"


class RelatedStrategy(str, Enum):
    WEIGHTED_TAGS = "weighted_tags"
    SEARCH_BASED = "search_based"
    TOKEN_BASED = "token_based"


@dataclass
class RankedResult:
    product: Product
    score: float
    matched_tags: List[str]
    algorithm: Algorithm
    reasons: List[str] = field(default_factory=list)
    explanation: str = ""
    breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass
class SearchResults:
    exact_matches: List[RankedResult] = field(default_factory=list)
    related_products: List[RankedResult] = field(default_factory=list)
    tokens: List[str] = field(default_factory=list)
    tag_suggestions: List[str] = field(default_factory=list)

    @property
    def all_results(self) -> List[RankedResult]:
        return self.exact_matches + self.related_products


@dataclass
class RelatedItems:
    products: List[RankedResult]
    algorithm: Algorithm
    debug: Dict[str, float] = field(default_factory=dict)
