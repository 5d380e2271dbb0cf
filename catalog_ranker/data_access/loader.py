import json
from typing import Any, List, Optional, Protocol

from catalog_ranker.config.paths import CATALOG_PATH, TAXONOMY_PATH
from catalog_ranker.core.taxonomy import Taxonomy
from catalog_ranker.models.product import Product
from catalog_ranker.utils.exceptions import DataLoadError
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)


class CatalogProvider(Protocol):
    def fetch_active_catalog(self) -> List[Product]:
        ...


def _load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        logger.error(f"File not found: {path}")
        raise DataLoadError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}")
        raise DataLoadError(f"Invalid JSON in {path}") from e


def parse_catalog(raw: Any, source: str = "<memory>") -> List[Product]:
    if isinstance(raw, dict) and "products" in raw:
        raw = raw["products"]
    if not isinstance(raw, list):
        raise DataLoadError(f"Catalog in {source} must be a list of products")

    products: List[Product] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning(f"Skipping catalog record #{i} in {source}: not an object")
            continue
        try:
            products.append(Product.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping catalog record #{i} in {source}: {e}")
    return products


def load_catalog(path: Optional[str] = None) -> List[Product]:
    path = path or CATALOG_PATH
    products = parse_catalog(_load_json(path), source=path)
    logger.info(f"Loaded {len(products)} products from {path}")
    return products


def load_taxonomy(path: Optional[str] = None) -> Taxonomy:
    path = path or TAXONOMY_PATH
    data = _load_json(path)
    if not isinstance(data, dict):
        raise DataLoadError(f"Taxonomy in {path} must be an object")
    taxonomy = Taxonomy.from_dict(data)
    logger.info(f"Loaded taxonomy from {path}: {len(taxonomy.tag_categories)} categorized tags")
    return taxonomy


class JsonCatalogProvider:
    """Catalog provider backed by a JSON file, re-read on every fetch."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or CATALOG_PATH

    def fetch_active_catalog(self) -> List[Product]:
        return [p for p in load_catalog(self.path) if p.active]
