from typing import Iterable, List, Optional

import networkx as nx

from catalog_ranker.core.classifier import classify
from catalog_ranker.core.taxonomy import DEFAULT_TAXONOMY, Taxonomy
from catalog_ranker.models.product import CategoryBucket, Product
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)


def product_node(product_id: str) -> str:
    return f"product:{product_id}"


def tag_node(tag_id: str) -> str:
    return f"tag:{tag_id}"


def bucket_node(bucket: CategoryBucket) -> str:
    return f"bucket:{bucket.value}"


def build_kg(
    products: Iterable[Product],
    taxonomy: Optional[Taxonomy] = None,
    focal: Optional[Product] = None,
) -> nx.Graph:
    """Transient product/tag/bucket graph over one catalog snapshot.

    The focal product is added even when it is filtered out of ``products``
    (masters and inactive items can still be the subject of a query).
    """
    taxonomy = taxonomy or DEFAULT_TAXONOMY
    KG = nx.Graph()

    # Buckets
    for bucket in CategoryBucket:
        KG.add_node(bucket_node(bucket), node_type="bucket", name=bucket.value)

    members: List[Product] = list(products)
    if focal is not None and not any(p.product_id == focal.product_id for p in members):
        members.append(focal)

    # Products and tags
    for p in members:
        pid = product_node(p.product_id)
        if KG.has_node(pid):
            continue
        bucket = classify(p, taxonomy)
        KG.add_node(
            pid,
            node_type="product",
            name=p.name,
            product_id=p.product_id,
            price=p.price,
            bucket=bucket,
            tag_count=p.tag_count,
            product_type=p.product_type,
            active=p.active,
        )
        KG.add_edge(pid, bucket_node(bucket), edge_type="IS_A")
        for tag in p.tags:
            tid = tag_node(tag.tag_id)
            if not KG.has_node(tid):
                KG.add_node(tid, node_type="tag", name=tag.name, category=taxonomy.category_of(tag))
            KG.add_edge(pid, tid, edge_type="HAS_TAG")

    logger.debug(f"KG built: {KG.number_of_nodes()} nodes, {KG.number_of_edges()} edges")
    return KG


def shared_tag_ids(KG: nx.Graph, product_id: str, other_id: str) -> List[str]:
    """Tag ids attached to both products, in the first product's tag order."""
    a, b = product_node(product_id), product_node(other_id)
    if not KG.has_node(a) or not KG.has_node(b):
        return []
    return [
        nb.split("tag:", 1)[1]
        for nb in KG.neighbors(a)
        if KG.nodes[nb].get("node_type") == "tag" and KG.has_edge(b, nb)
    ]


def product_bucket(KG: nx.Graph, product_id: str) -> CategoryBucket:
    return KG.nodes[product_node(product_id)].get("bucket", CategoryBucket.UNKNOWN)


def products_in_bucket(KG: nx.Graph, bucket: CategoryBucket) -> List[str]:
    return [
        KG.nodes[nb]["product_id"]
        for nb in KG.neighbors(bucket_node(bucket))
        if KG.nodes[nb].get("node_type") == "product"
    ]
