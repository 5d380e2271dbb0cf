from typing import Iterable, List, Optional

import networkx as nx

from catalog_ranker.core.kg_builder import build_kg
from catalog_ranker.core.related import DEFAULT_MAX_RESULTS, ContextSignals, related_items
from catalog_ranker.core.search import search
from catalog_ranker.core.taxonomy import DEFAULT_TAXONOMY, Taxonomy
from catalog_ranker.core.token_compat import search_by_token_compatibility
from catalog_ranker.models.product import Product
from catalog_ranker.models.ranking import RelatedItems, RelatedStrategy, SearchResults


class RankingEngine:
    """Search and related-items ranking over a caller-supplied catalog snapshot.

    Holds nothing but the taxonomy, so one instance can serve concurrent calls.
    """

    def __init__(self, taxonomy: Optional[Taxonomy] = None) -> None:
        self.taxonomy: Taxonomy = taxonomy or DEFAULT_TAXONOMY

    def search(self, query: str, catalog: List[Product], exclude_ids: Iterable[str] = ()) -> SearchResults:
        return search(query, catalog, exclude_ids=exclude_ids)

    def token_search(self, query: str, catalog: List[Product], exclude_ids: Iterable[str] = ()) -> SearchResults:
        return search_by_token_compatibility(query, catalog, exclude_ids=exclude_ids)

    def related_items(
        self,
        focal: Product,
        catalog: List[Product],
        max_results: int = DEFAULT_MAX_RESULTS,
        strategy: RelatedStrategy = RelatedStrategy.WEIGHTED_TAGS,
        signals: Optional[ContextSignals] = None,
    ) -> RelatedItems:
        return related_items(
            focal,
            catalog,
            max_results=max_results,
            strategy=strategy,
            taxonomy=self.taxonomy,
            signals=signals,
        )

    def build_graph(self, catalog: List[Product], focal: Optional[Product] = None) -> nx.Graph:
        return build_kg(catalog, self.taxonomy, focal)
