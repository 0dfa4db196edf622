"""
Core package for the AI Product Finder.

This package contains:
- models: Product and RecommendationResult records
- scoring: Deterministic local scorer (terms, budget, scoring)
- llm_ranker: Gemini-backed ranking path
- recommender: LLM-first orchestration with local fallback
- filters: Optional category, brand, price and rating pre-filters
"""

from .models import Product, RecommendationResult, parse_catalog
from .scoring import extract_budget, extract_terms, local_recommend, score_product
from .recommender import ProductRecommender, get_recommender, recommend
from .filters import apply_catalog_filters

__all__ = [
    "Product",
    "RecommendationResult",
    "parse_catalog",
    "extract_budget",
    "extract_terms",
    "local_recommend",
    "score_product",
    "ProductRecommender",
    "get_recommender",
    "recommend",
    "apply_catalog_filters",
]
