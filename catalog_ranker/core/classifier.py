from typing import Optional

from catalog_ranker.core.normalize import normalize
from catalog_ranker.core.taxonomy import DEFAULT_TAXONOMY, Taxonomy
from catalog_ranker.models.product import CategoryBucket, Product


def classify(product: Product, taxonomy: Optional[Taxonomy] = None) -> CategoryBucket:
    """Coarse bucket of a product, taken from the first bucket whose keyword occurs in one of its tag names."""
    taxonomy = taxonomy or DEFAULT_TAXONOMY
    if not product.tags:
        return CategoryBucket.UNKNOWN

    tag_names = [normalize(tag.name) for tag in product.tags]
    for bucket, keywords in taxonomy.bucket_keywords.items():
        for keyword in keywords:
            needle = normalize(keyword)
            if needle and any(needle in name for name in tag_names):
                return bucket
    return CategoryBucket.UNKNOWN
