import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from catalog_ranker.core.normalize import slugify
from catalog_ranker.utils.logger import get_logger

logger = get_logger(__name__)

MIN_TAG_WEIGHT = 1
MAX_TAG_WEIGHT = 5


class TagCategory(str, Enum):
    FRANCHISE = "FRANCHISE"
    MAIN_GAME = "MAIN_GAME"
    GENRE = "GENRE"
    DEVELOPER = "DEVELOPER"
    PLATFORM = "PLATFORM"
    ATTRIBUTE = "ATTRIBUTE"
    GENERIC = "GENERIC"

    @classmethod
    def parse(cls, value: Any) -> "TagCategory":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
        if value is not None:
            logger.debug(f"Unknown tag category {value!r}, using GENERIC")
        return cls.GENERIC


class ProductType(str, Enum):
    SIMPLE = "simple"
    MASTER = "master"
    VARIANT = "variant"

    @classmethod
    def parse(cls, value: Any) -> "ProductType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug(f"Unknown product type {value!r}, using simple")
            return cls.SIMPLE


class CategoryBucket(str, Enum):
    """Coarse domain partition, unrelated to the merchandising ``Product.category``."""

    GAMES = "games"
    ACCESSORIES = "accessories"
    CLOTHING = "clothing"
    COLLECTIBLES = "collectibles"
    UNKNOWN = "unknown"


def clamp_weight(weight: Any, tag_id: str = "") -> int:
    try:
        value = float(weight)
    except OverflowError:
        value = math.inf if weight > 0 else -math.inf
    except (TypeError, ValueError):
        value = math.nan
    if math.isnan(value):
        logger.warning(f"Tag {tag_id!r} has non-numeric weight {weight!r}, using {MIN_TAG_WEIGHT}")
        return MIN_TAG_WEIGHT
    if value < MIN_TAG_WEIGHT or value > MAX_TAG_WEIGHT:
        # infinities land on the nearest bound
        clamped = int(max(MIN_TAG_WEIGHT, min(MAX_TAG_WEIGHT, value)))
        logger.warning(f"Tag {tag_id!r} weight {weight!r} outside [{MIN_TAG_WEIGHT}, {MAX_TAG_WEIGHT}], clamped to {clamped}")
        return clamped
    return int(value)


@dataclass
class Tag:
    tag_id: str
    name: str
    weight: int = 1
    category: TagCategory = TagCategory.GENERIC

    def __post_init__(self) -> None:
        self.weight = clamp_weight(self.weight, self.tag_id)
        self.category = TagCategory.parse(self.category)

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], str]) -> "Tag":
        if isinstance(data, str):
            return cls(tag_id=slugify(data), name=data)
        name = data.get("name") or data.get("id") or data.get("tag_id") or ""
        tag_id = data.get("id") or data.get("tag_id") or slugify(name)
        return cls(
            tag_id=str(tag_id),
            name=str(name),
            weight=data.get("weight", 1),
            category=data.get("category"),
        )


@dataclass
class Product:
    product_id: str
    name: str
    category: str = ""
    tags: List[Tag] = field(default_factory=list)
    price: float = 0.0
    active: bool = True
    product_type: ProductType = ProductType.SIMPLE

    def __post_init__(self) -> None:
        self.product_type = ProductType.parse(self.product_type)

        try:
            price = float(self.price)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Product {self.product_id!r} has non-numeric price {self.price!r}, using 0")
            price = 0.0
        if not math.isfinite(price):
            logger.warning(f"Product {self.product_id!r} has non-finite price {price}, using 0")
            price = 0.0
        if price < 0:
            logger.warning(f"Product {self.product_id!r} has negative price {price}, clamped to 0")
            price = 0.0
        self.price = price

        seen = set()
        unique: List[Tag] = []
        for tag in self.tags:
            if tag.tag_id in seen:
                logger.warning(f"Product {self.product_id!r} repeats tag {tag.tag_id!r}, keeping the first")
                continue
            seen.add(tag.tag_id)
            unique.append(tag)
        self.tags = unique

    @property
    def is_master(self) -> bool:
        return self.product_type == ProductType.MASTER

    @property
    def tag_count(self) -> int:
        return len(self.tags)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        pid = data.get("product_id", data.get("id"))
        if pid is None:
            raise KeyError("product record has no 'id' / 'product_id'")
        active = data.get("active", data.get("is_active", True))
        return cls(
            product_id=str(pid),
            name=str(data.get("name") or ""),
            category=str(data.get("category") or ""),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            price=data.get("price", 0.0),
            active=True if active is None else bool(active),
            product_type=data.get("product_type", data.get("productType", ProductType.SIMPLE)),
        )
