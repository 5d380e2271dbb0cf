import re
import unicodedata
from typing import List, Optional

MIN_TOKEN_LENGTH = 2

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize(text: Optional[str]) -> str:
    """Lower-case, strip diacritics and collapse everything outside [a-z0-9] to single spaces."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub(" ", stripped).strip()


def tokenize(text: Optional[str], min_length: int = MIN_TOKEN_LENGTH) -> List[str]:
    return [tok for tok in normalize(text).split() if len(tok) >= min_length]


def slugify(text: Optional[str]) -> str:
    return "-".join(normalize(text).split())
