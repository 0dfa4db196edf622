"""
Catalog Filters for the AI Product Finder.

Optional pre-filters a storefront can apply before ranking:
1. Category (exact match)
2. Brand (exact match)
3. Price range (inclusive [min, max])
4. Minimum rating

Filters narrow the catalog handed to the recommender; they never reorder
it. An empty value or "all" disables a filter.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from finder.exceptions import InvalidFilterError
from finder.models import Product

logger = logging.getLogger(__name__)

# Select-box value meaning "no filter"
ALL_VALUES = "all"


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or value.strip().lower() == ALL_VALUES
    return False


def _get_rating(product: Product) -> float:
    """
    Read a product's rating from its extra attributes.

    Missing or unparseable ratings count as 0.
    """
    try:
        return float(product.attributes.get("rating", 0) or 0)
    except (TypeError, ValueError):
        logger.debug(f"Could not parse rating for product {product.id}")
        return 0.0


def apply_category_filter(
    products: Sequence[Product],
    category: Optional[str]
) -> List[Product]:
    """
    Keep products whose category equals ``category``.

    Args:
        products: Candidate products
        category: Category to keep, or None/""/"all" for no filter

    Returns:
        Matching products in catalog order
    """
    if _is_unset(category):
        return list(products)

    filtered = [p for p in products if p.category == category]
    logger.debug(f"Category filter: {len(filtered)}/{len(products)} in {category}")
    return filtered


def apply_brand_filter(
    products: Sequence[Product],
    brand: Optional[str]
) -> List[Product]:
    """Keep products whose brand equals ``brand``."""
    if _is_unset(brand):
        return list(products)

    filtered = [p for p in products if p.brand == brand]
    logger.debug(f"Brand filter: {len(filtered)}/{len(products)} from {brand}")
    return filtered


def _parse_price_range(price_range: Any) -> Tuple[float, float]:
    if not isinstance(price_range, (list, tuple)) or len(price_range) != 2:
        raise InvalidFilterError("price_range must be a [min, max] pair")
    try:
        low, high = float(price_range[0]), float(price_range[1])
    except (TypeError, ValueError) as e:
        raise InvalidFilterError(f"price_range values must be numbers: {price_range!r}") from e
    if low > high:
        raise InvalidFilterError(f"price_range min is above max: {price_range!r}")
    return low, high


def apply_price_range_filter(
    products: Sequence[Product],
    price_range: Optional[Sequence[float]]
) -> List[Product]:
    """
    Keep products priced within ``[min, max]`` (both ends inclusive).

    Args:
        products: Candidate products
        price_range: Two-item sequence, or None for no filter

    Returns:
        Products within the range

    Raises:
        InvalidFilterError: If the range is not a valid [min, max] pair
    """
    if price_range is None:
        return list(products)

    low, high = _parse_price_range(price_range)
    filtered = [p for p in products if low <= p.price <= high]
    logger.debug(f"Price filter ({low}-{high}): {len(filtered)}/{len(products)} products passed")
    return filtered


def apply_rating_filter(
    products: Sequence[Product],
    min_rating: Optional[float]
) -> List[Product]:
    """Keep products rated at least ``min_rating``; 0 or None disables."""
    if not min_rating:
        return list(products)

    try:
        threshold = float(min_rating)
    except (TypeError, ValueError) as e:
        raise InvalidFilterError(f"min_rating must be a number: {min_rating!r}") from e

    filtered = [p for p in products if _get_rating(p) >= threshold]
    logger.debug(f"Rating filter (>= {threshold}): {len(filtered)}/{len(products)} products passed")
    return filtered


def apply_catalog_filters(
    products: Sequence[Product],
    filters: Optional[Dict[str, Any]] = None
) -> List[Product]:
    """
    Apply every requested filter in order: category, brand, price, rating.

    Args:
        products: Candidate products
        filters: Dict with optional keys ``category``, ``brand``,
            ``price_range`` ([min, max]) and ``min_rating``

    Returns:
        Products passing all filters, in catalog order

    Raises:
        InvalidFilterError: If ``filters`` or one of its values is malformed

    Example:
        >>> apply_catalog_filters(catalog, {"category": "laptops", "price_range": [0, 1000]})
    """
    if not filters:
        return list(products)

    if not isinstance(filters, dict):
        raise InvalidFilterError("filters must be an object")

    filtered = apply_category_filter(products, filters.get("category"))
    filtered = apply_brand_filter(filtered, filters.get("brand"))
    filtered = apply_price_range_filter(filtered, filters.get("price_range"))
    filtered = apply_rating_filter(filtered, filters.get("min_rating"))

    logger.info(f"Filters complete: {len(filtered)}/{len(products)} products passed")
    return filtered
