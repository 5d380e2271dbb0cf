import unicodedata
from typing import Iterable, List, Tuple

from catalog_ranker.models.ranking import RankedResult

SCORE_PRECISION = 6


def collation_key(name: str) -> Tuple[str, str]:
    """Accent- and case-insensitive first, raw name second."""
    decomposed = unicodedata.normalize("NFD", name or "")
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return folded, name or ""


def result_sort_key(result: RankedResult, prefer_tag_rich: bool = False) -> Tuple:
    p = result.product
    score = -round(result.score, SCORE_PRECISION)
    if prefer_tag_rich:
        return (score, -p.tag_count, p.price, collation_key(p.name), p.product_id)
    return (score, p.price, collation_key(p.name), p.product_id)


def order_results(results: Iterable[RankedResult], prefer_tag_rich: bool = False) -> List[RankedResult]:
    return sorted(results, key=lambda r: result_sort_key(r, prefer_tag_rich))


def popularity_sort_key(result: RankedResult) -> Tuple:
    # tag count stands in for popularity until real usage signals exist
    p = result.product
    return (-p.tag_count, p.price, collation_key(p.name), p.product_id)
