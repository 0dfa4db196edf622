"""
Data model for the AI Product Finder.

Products arrive as JSON objects from the caller. Only ``id``, ``name``,
``price``, ``category`` and ``brand`` are read by the ranking code; every
other field (image, description, rating, ...) is kept in ``attributes`` and
handed back untouched in the response.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from finder.exceptions import InvalidProductError

_DECLARED_FIELDS = ("id", "name", "price", "category", "brand")
_OPTIONAL_FIELDS = ("category", "brand")
_INTEGER_ID_RE = re.compile(r"-?\d+", re.ASCII)


def _parse_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidProductError(f"id must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_ID_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidProductError(f"id must be an integer, got {value!r}")


def _parse_price(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidProductError(f"price must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        price = value
    else:
        try:
            price = float(str(value).replace("$", "").replace(",", "").strip())
        except (TypeError, ValueError) as e:
            raise InvalidProductError(f"price must be a number, got {value!r}") from e
    if math.isnan(price) or math.isinf(price) or price < 0:
        raise InvalidProductError(f"price must be a finite non-negative number, got {value!r}")
    return price


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Product:
    """A catalog entry as seen by the ranking code."""

    id: int
    name: str
    price: float
    category: Optional[str] = None
    brand: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    # Optional keys sent as explicit null, echoed back as null
    null_fields: FrozenSet[str] = field(default_factory=frozenset, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        """
        Build a Product from a JSON object.

        Args:
            data: Mapping with at least ``id``, ``name`` and ``price``

        Returns:
            Product instance

        Raises:
            InvalidProductError: If a required field is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidProductError(f"product must be an object, got {type(data).__name__}")

        for key in ("id", "name", "price"):
            if data.get(key) is None:
                raise InvalidProductError(f"product is missing '{key}'")

        return cls(
            id=_parse_id(data["id"]),
            name=str(data["name"]),
            price=_parse_price(data["price"]),
            category=_optional_text(data.get("category")),
            brand=_optional_text(data.get("brand")),
            attributes={k: v for k, v in data.items() if k not in _DECLARED_FIELDS},
            null_fields=frozenset(
                k for k in _OPTIONAL_FIELDS if k in data and data[k] is None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON representation: declared fields first, then extra attributes."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
        }
        for key in _OPTIONAL_FIELDS:
            value = getattr(self, key)
            if value is not None or key in self.null_fields:
                data[key] = value
        data.update(self.attributes)
        return data


def parse_catalog(items: List[Mapping[str, Any]]) -> List[Product]:
    """Convert a list of JSON objects into Products, preserving order."""
    return [Product.from_dict(item) for item in items]


@dataclass(frozen=True)
class RecommendationResult:
    """Ranked products plus where they came from."""

    products: List[Product]
    source: str  # "llm" or "local"
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [p.to_dict() for p in self.products],
            "reasoning": self.reasoning,
            "source": self.source,
        }
