from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from catalog_ranker.models.product import CategoryBucket, Tag, TagCategory
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORY_WEIGHTS: Dict[TagCategory, int] = {
    TagCategory.FRANCHISE: 100,   # resident-evil, final-fantasy, mario
    TagCategory.MAIN_GAME: 80,    # the-last-of-us, cyberpunk-2077
    TagCategory.GENRE: 50,        # survival-horror, rpg, fps
    TagCategory.DEVELOPER: 40,    # capcom, naughty-dog, square-enix
    TagCategory.PLATFORM: 20,     # playstation-5, pc, nintendo-switch
    TagCategory.ATTRIBUTE: 10,    # remake, multiplayer, 4k
    TagCategory.GENERIC: 5,       # jogo, acessorio, lancamento
}

# Consulted only for tags that carry no category of their own.
DEFAULT_TAG_CATEGORIES: Dict[str, TagCategory] = {
    "resident-evil": TagCategory.FRANCHISE,
    "final-fantasy": TagCategory.FRANCHISE,
    "mario": TagCategory.FRANCHISE,
    "zelda": TagCategory.FRANCHISE,
    "fifa": TagCategory.FRANCHISE,
    "the-last-of-us": TagCategory.MAIN_GAME,
    "cyberpunk-2077": TagCategory.MAIN_GAME,
    "god-of-war": TagCategory.MAIN_GAME,
    "horizon": TagCategory.MAIN_GAME,
    "survival-horror": TagCategory.GENRE,
    "rpg": TagCategory.GENRE,
    "fps": TagCategory.GENRE,
    "esporte": TagCategory.GENRE,
    "acao": TagCategory.GENRE,
    "aventura": TagCategory.GENRE,
    "capcom": TagCategory.DEVELOPER,
    "naughty-dog": TagCategory.DEVELOPER,
    "square-enix": TagCategory.DEVELOPER,
    "sony": TagCategory.DEVELOPER,
    "nintendo": TagCategory.DEVELOPER,
    "playstation-5": TagCategory.PLATFORM,
    "playstation-4": TagCategory.PLATFORM,
    "pc": TagCategory.PLATFORM,
    "nintendo-switch": TagCategory.PLATFORM,
    "xbox": TagCategory.PLATFORM,
    "remake": TagCategory.ATTRIBUTE,
    "multiplayer": TagCategory.ATTRIBUTE,
    "4k": TagCategory.ATTRIBUTE,
    "dlc": TagCategory.ATTRIBUTE,
    "edicao-especial": TagCategory.ATTRIBUTE,
    "jogo": TagCategory.GENERIC,
    "acessorio": TagCategory.GENERIC,
    "lancamento": TagCategory.GENERIC,
    "promocao": TagCategory.GENERIC,
}

# Order matters: a product lands in the first bucket with a matching keyword.
DEFAULT_BUCKET_KEYWORDS: Dict[CategoryBucket, Tuple[str, ...]] = {
    CategoryBucket.GAMES: ("jogo", "game", "videogame"),
    CategoryBucket.ACCESSORIES: ("acessorio", "controle", "headset", "mouse", "teclado"),
    CategoryBucket.CLOTHING: ("roupa", "camiseta", "pantufa", "vestuario"),
    CategoryBucket.COLLECTIBLES: ("colecionavel", "figura", "boneco", "poster"),
}


@dataclass(frozen=True)
class Taxonomy:
    """Tag-weight, tag-category and bucket-keyword tables used by the ranking engine."""

    category_weights: Mapping[TagCategory, int] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS))
    tag_categories: Mapping[str, TagCategory] = field(default_factory=lambda: dict(DEFAULT_TAG_CATEGORIES))
    bucket_keywords: Mapping[CategoryBucket, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_BUCKET_KEYWORDS)
    )

    def category_of(self, tag: Tag) -> TagCategory:
        if tag.category != TagCategory.GENERIC:
            return tag.category
        return self.tag_categories.get(tag.tag_id, TagCategory.GENERIC)

    def weight_of(self, tag: Tag) -> int:
        return self.category_weights.get(self.category_of(tag), 0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Taxonomy":
        """Build a taxonomy from its JSON form; missing sections keep the defaults."""
        weights: Dict[TagCategory, int] = dict(DEFAULT_CATEGORY_WEIGHTS)
        for name, weight in (data.get("category_weights") or {}).items():
            key = str(name).strip().upper().replace("-", "_")
            if key not in TagCategory.__members__:
                logger.warning(f"Skipping weight for unknown tag category {name!r}")
                continue
            try:
                weights[TagCategory[key]] = max(0, int(weight))
            except (TypeError, ValueError):
                logger.warning(f"Skipping non-numeric weight {weight!r} for tag category {name!r}")

        tag_categories: Dict[str, TagCategory] = dict(DEFAULT_TAG_CATEGORIES)
        if "tag_categories" in data:
            tag_categories = {
                str(tag_id): TagCategory.parse(cat) for tag_id, cat in (data.get("tag_categories") or {}).items()
            }

        buckets: Dict[CategoryBucket, Tuple[str, ...]] = dict(DEFAULT_BUCKET_KEYWORDS)
        if "bucket_keywords" in data:
            buckets = {}
            for name, keywords in (data.get("bucket_keywords") or {}).items():
                try:
                    bucket = CategoryBucket(str(name).strip().lower())
                except ValueError:
                    logger.warning(f"Skipping keywords for unknown category bucket {name!r}")
                    continue
                if bucket == CategoryBucket.UNKNOWN:
                    logger.warning("Keywords for the 'unknown' bucket are ignored")
                    continue
                buckets[bucket] = tuple(str(k) for k in keywords)

        return cls(category_weights=weights, tag_categories=tag_categories, bucket_keywords=buckets)


DEFAULT_TAXONOMY = Taxonomy()
