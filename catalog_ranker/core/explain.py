from typing import List

RULE_EXPLANATIONS = {
    # related items
    "shared_franchise": "Same franchise.",
    "shared_main_game": "Same game.",
    "shared_genre": "Shares a genre.",
    "shared_developer": "Shares a developer tag.",
    "shared_platform": "Same platform.",
    "shared_attribute": "Shares an attribute.",
    "shared_generic": "Shares a generic tag.",
    "same_developer": "Made by the same developer.",
    "popular_item": "Well documented item.",
    "frequently_bought_together": "Frequently bought together.",
    "recent_release": "Recent release.",
    "category_fallback": "Same kind of product.",
    "popular_fallback": "Popular in the catalog.",
    "fallback": "Suggested from the wider catalog.",
    # search
    "tag_match": "Matches product tags.",
    "name_match": "Search terms appear in the product name.",
    "category_match": "Search terms appear in the product category.",
    "whole_query_match": "The whole search appears in the product.",
    "token_match": "Search words are compatible with product tags.",
    "same_category": "Same store category.",
}


def build_explanation(rule_tags: List[str], matched_tags: List[str]) -> str:
    parts = [RULE_EXPLANATIONS[t] for t in rule_tags if t in RULE_EXPLANATIONS]
    if matched_tags:
        parts.append("Matched tags: " + ", ".join(matched_tags) + ".")
    return " ".join(parts).strip()
