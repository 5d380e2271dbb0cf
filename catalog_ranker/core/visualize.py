from typing import List, Optional, Set, Tuple

import networkx as nx
from matplotlib.figure import Figure

from catalog_ranker.core.kg_builder import product_node
from catalog_ranker.models.product import Product
from catalog_ranker.models.ranking import RankedResult

NODE_COLORS = {
    "bucket": "#cfe2ff",
    "tag": "#ffccd5",
}
FOCAL_COLOR = "#ffe680"
RESULT_COLOR = "#b3ffb3"
DEFAULT_COLOR = "#f0f0f0"


def visualize_related_paths(KG: nx.Graph, focal: Product, results: List[RankedResult]) -> Optional[Figure]:
    """Shortest graph paths from the focal product to each related result."""
    if not results:
        return None

    root_id = product_node(focal.product_id)
    target_ids = [product_node(r.product.product_id) for r in results if KG.has_node(product_node(r.product.product_id))]
    if not KG.has_node(root_id) or not target_ids:
        return None

    # shared tags explain a relation better than a shared bucket
    via_tags = nx.subgraph_view(KG, filter_node=lambda n: KG.nodes[n].get("node_type") != "bucket")

    edges: Set[Tuple[str, str]] = set()
    for tid in target_ids:
        path = _shortest_path(via_tags, root_id, tid) or _shortest_path(KG, root_id, tid)
        if path:
            edges.update(zip(path, path[1:]))

    if not edges:
        return None

    sub = KG.edge_subgraph(list(edges)).copy()
    reached = [t for t in target_ids if t in sub]

    # detached from pyplot
    fig = Figure(figsize=(10, 6))
    ax = fig.add_subplot()
    shells = [
        [root_id],
        [n for n in sub.nodes() if n != root_id and n not in reached],
        reached,
    ]
    pos = nx.shell_layout(sub, nlist=[s for s in shells if s])

    colors = []
    for n in sub.nodes():
        if n == root_id:
            colors.append(FOCAL_COLOR)
        elif n in reached:
            colors.append(RESULT_COLOR)
        else:
            colors.append(NODE_COLORS.get(sub.nodes[n].get("node_type"), DEFAULT_COLOR))

    nx.draw_networkx_nodes(sub, pos, node_size=650, node_color=colors, edgecolors="#000000", ax=ax)
    nx.draw_networkx_edges(sub, pos, alpha=0.7, width=1.5, edge_color="#bbbbbb", ax=ax)

    labels = {n: sub.nodes[n].get("name", n) for n in sub.nodes()}
    nx.draw_networkx_labels(sub, pos, labels=labels, font_size=8, font_color="#000000", ax=ax)

    ax.set_facecolor("#050b16")
    ax.set_title(f"Why these items relate to '{focal.name}'", fontsize=10)
    ax.axis("off")
    return fig


def _shortest_path(G: nx.Graph, source: str, target: str) -> Optional[List[str]]:
    try:
        return nx.shortest_path(G, source=source, target=target)
    except nx.NetworkXNoPath:
        return None
