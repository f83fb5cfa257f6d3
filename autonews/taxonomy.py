from enum import Enum
from typing import Iterable, Optional

DEFAULT_BRANDS = [
    "Toyota", "Nissan", "Ford", "BMW", "Mercedes",
    "Changan", "BYD", "Geely", "Jetour", "Tesla", "MG",
]

OTHER_BRAND = "Other"


class NewsType(str, Enum):
    launch = "launch"
    policy = "policy"
    sales = "sales"
    personnel = "personnel"
    competitor = "competitor"
    other = "other"


class Sentiment(str, Enum):
    positive = "positive"
    neutral = "neutral"
    negative = "negative"


def coerce_type(value) -> NewsType:
    """Qualquer valor fora da enumeração fechada vira ``other``."""
    if isinstance(value, NewsType):
        return value
    if isinstance(value, str):
        try:
            return NewsType(value.strip().lower())
        except ValueError:
            pass
    return NewsType.other


def coerce_sentiment(value) -> Optional[Sentiment]:
    if isinstance(value, Sentiment):
        return value
    if isinstance(value, str):
        try:
            return Sentiment(value.strip().lower())
        except ValueError:
            return None
    return None


def match_brand(value, brands: Iterable[str]) -> Optional[str]:
    """Retorna a grafia canônica da marca se ela estiver na lista."""
    if not isinstance(value, str):
        return None
    needle = value.strip().lower()
    for brand in brands:
        if brand.lower() == needle:
            return brand
    return None


def brand_bucket(brand: Optional[str], brands: Iterable[str]) -> str:
    return match_brand(brand, brands) or OTHER_BRAND
