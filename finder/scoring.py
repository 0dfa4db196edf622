"""
Local Product Scorer for the AI Product Finder.

This module is the deterministic, LLM-free ranking path. It is used:
1. As the fallback when the LLM ranker fails or returns nothing usable
2. As the only path when no LLM credential is configured

Pipeline:
    query -> term set (tokenize + synonym expansion)
    query -> budget (first standalone 2-5 digit number)
    catalog -> budget cutoff -> stable sort by score -> top 10

Every HTTP entry point goes through ``local_recommend``; there is no
per-route copy of this logic.
"""

import logging
import re
from typing import FrozenSet, Iterable, List, Optional, Sequence

from config import (
    BUDGET_PATTERN,
    MAX_RECOMMENDATIONS,
    SCORE_WEIGHTS,
    SYNONYM_EXPANSIONS,
)
from finder.models import Product

logger = logging.getLogger(__name__)

_NON_TERM_CHARS = re.compile(r"[^a-z0-9\s]")
_BUDGET_RE = re.compile(BUDGET_PATTERN, re.ASCII)


# =============================================================================
# TERM EXTRACTION
# =============================================================================

def tokenize(query: str) -> List[str]:
    """
    Split a raw query into lowercase alphanumeric terms.

    Punctuation becomes whitespace so adjacent words are not merged,
    e.g. ``"$500"`` -> ``["500"]`` and ``"wi-fi"`` -> ``["wi", "fi"]``.

    Args:
        query: Raw query text

    Returns:
        Terms in query order, duplicates kept
    """
    if not query:
        return []
    cleaned = _NON_TERM_CHARS.sub(" ", query.lower())
    return cleaned.split()


def expand_synonyms(terms: Iterable[str]) -> FrozenSet[str]:
    """
    Add the configured synonyms for every trigger term present.

    Expansion runs once over the original terms, so an added term
    never triggers another expansion.

    Args:
        terms: Raw query terms

    Returns:
        Term set including synonyms
    """
    base = set(terms)
    expanded = set(base)
    for term in base:
        expanded.update(SYNONYM_EXPANSIONS.get(term, ()))
    return frozenset(expanded)


def extract_terms(query: str) -> FrozenSet[str]:
    """Tokenize a query and expand synonyms into the final term set."""
    return expand_synonyms(tokenize(query))


# =============================================================================
# BUDGET EXTRACTION
# =============================================================================

def extract_budget(query: str) -> Optional[int]:
    """
    Read a price ceiling from the raw query.

    Only the first standalone run of 2 to 5 digits counts. Single digits
    and runs of 6+ digits are ignored, so are digits glued to letters
    (``"iphone14"``). A model year such as ``"2024"`` is read as a budget.

    Args:
        query: Raw, unmodified query text

    Returns:
        Budget as an int, or None when the query has no qualifying number

    Example:
        >>> extract_budget("laptop under $700 please")
        700
        >>> extract_budget("tv 5 stars") is None
        True
    """
    if not query:
        return None
    match = _BUDGET_RE.search(query)
    if not match:
        return None
    return int(match.group(1))


# =============================================================================
# SCORING
# =============================================================================

def _haystack(product: Product) -> str:
    # Missing brand/category become empty strings, separators stay
    return f"{product.name} {product.brand or ''} {product.category or ''}".lower()


def score_product(product: Product, terms: Iterable[str]) -> int:
    """
    Score a product against a term set.

    Per non-empty term:
    - +2 if the term is a substring of "name brand category"
    - +3 if the term equals the category (case-insensitive)
    - +2 if the term equals the brand (case-insensitive)

    Args:
        product: Product to score
        terms: Query term set

    Returns:
        Non-negative integer score, 0 when nothing matches
    """
    haystack = _haystack(product)
    category = (product.category or "").lower()
    brand = (product.brand or "").lower()

    score = 0
    for term in terms:
        if not term:
            continue
        if term in haystack:
            score += SCORE_WEIGHTS["text_match"]
        if category and category == term:
            score += SCORE_WEIGHTS["category_match"]
        if brand and brand == term:
            score += SCORE_WEIGHTS["brand_match"]
    return score


def apply_budget(products: Sequence[Product], budget: Optional[int]) -> List[Product]:
    """
    Keep products priced at or below the budget.

    This is a hard cutoff: when nothing fits, the result is empty.
    """
    if budget is None:
        return list(products)

    filtered = [p for p in products if p.price <= budget]
    logger.debug(f"Budget filter ({budget}): {len(filtered)}/{len(products)} products passed")
    return filtered


# =============================================================================
# LOCAL RECOMMENDATION
# =============================================================================

def local_recommend(query: str, catalog: Sequence[Product]) -> List[Product]:
    """
    Rank a catalog against a query without calling any model.

    Steps:
    1. Extract the term set and budget from the query
    2. Drop products above the budget (if any)
    3. Stable sort by score, highest first (ties keep catalog order)
    4. Keep the first MAX_RECOMMENDATIONS products

    Args:
        query: Raw query text, may be empty
        catalog: Candidate products, never mutated

    Returns:
        Up to MAX_RECOMMENDATIONS products; empty list when nothing qualifies
    """
    if not catalog:
        return []

    terms = extract_terms(query)
    budget = extract_budget(query)

    candidates = apply_budget(catalog, budget)
    ranked = sorted(candidates, key=lambda p: score_product(p, terms), reverse=True)
    result = ranked[:MAX_RECOMMENDATIONS]

    logger.info(
        f"Local scorer: {len(result)} of {len(catalog)} products "
        f"(terms={sorted(terms)}, budget={budget})"
    )
    return result
