from typing import List, Optional

from matplotlib.figure import Figure

from catalog_ranker.core.engine import RankingEngine
from catalog_ranker.core.related import DEFAULT_MAX_RESULTS, ContextSignals
from catalog_ranker.core.visualize import visualize_related_paths
from catalog_ranker.data_access.loader import CatalogProvider, JsonCatalogProvider, load_taxonomy
from catalog_ranker.models.product import Product
from catalog_ranker.models.ranking import RelatedItems, RelatedStrategy, SearchResults
from catalog_ranker.utils.exceptions import ProductNotFoundError


class CatalogService:
    """High-level service for a presentation or API layer.

    Fetches one catalog snapshot per operation and hands it to the engine.
    Without an explicit engine, ranks with the bundled taxonomy file.
    """

    def __init__(
        self,
        provider: Optional[CatalogProvider] = None,
        engine: Optional[RankingEngine] = None,
    ) -> None:
        self.provider: CatalogProvider = provider or JsonCatalogProvider()
        self.engine: RankingEngine = engine or RankingEngine(load_taxonomy())

    def list_categories(self) -> List[str]:
        return sorted({p.category for p in self.provider.fetch_active_catalog() if p.category})

    def search(self, query: str) -> SearchResults:
        return self.engine.search(query, self.provider.fetch_active_catalog())

    def related_items(
        self,
        product_id: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        strategy: RelatedStrategy = RelatedStrategy.WEIGHTED_TAGS,
        signals: Optional[ContextSignals] = None,
    ) -> RelatedItems:
        catalog = self.provider.fetch_active_catalog()
        focal = _find_product(catalog, product_id)
        return self.engine.related_items(focal, catalog, max_results=max_results, strategy=strategy, signals=signals)

    def build_visualization(self, product_id: str, related: RelatedItems) -> Optional[Figure]:
        catalog = self.provider.fetch_active_catalog()
        focal = _find_product(catalog, product_id)
        KG = self.engine.build_graph(catalog, focal)
        return visualize_related_paths(KG, focal, related.products)


def _find_product(catalog: List[Product], product_id: str) -> Product:
    for p in catalog:
        if p.product_id == product_id:
            return p
    raise ProductNotFoundError(f"Product not found: {product_id}")
