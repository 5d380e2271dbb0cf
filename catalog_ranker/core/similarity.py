def is_containment(token: str, tag: str) -> bool:
    if not token or not tag:
        return False
    return token in tag or tag in token


def tag_similarity(token: str, tag: str) -> float:
    """Similarity in [0, 1] between a normalized query token and a normalized tag name.

    Equal strings score 1.0, containment either way scores the length ratio
    (rewarding near-equal lengths) and anything else scores 0.0.
    """
    if not token or not tag:
        return 0.0
    if token == tag:
        return 1.0
    if is_containment(token, tag):
        return min(len(token), len(tag)) / max(len(token), len(tag))
    return 0.0


def positional_similarity(a: str, b: str) -> float:
    """1 - (mismatched positions + length difference) / longer length."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    distance = sum(1 for x, y in zip(a, b) if x != y) + abs(len(a) - len(b))
    return max(0.0, 1 - distance / longest)


def suggestion_similarity(token: str, tag: str) -> float:
    # containment is a hit, not a suggestion; keep it at the top of the range
    if is_containment(token, tag):
        return 0.9
    return positional_similarity(token, tag)
