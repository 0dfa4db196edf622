"""
Product Recommender for the AI Product Finder.

This module is the orchestration layer:

1. LLM Ranking (when a credential is configured)
   - Sends the query and full catalog to Gemini
   - Maps the returned ids back onto the catalog

2. Local Fallback
   - Used when no LLM is configured, when the LLM call fails or times
     out, and when its answer matches no catalog product
   - Replaces the LLM result entirely; results are never merged

``recommend`` never raises: every failure degrades to the local scorer.
"""

import logging
from typing import List, Optional, Sequence

from config import LLM_CONFIG
from finder.llm_ranker import GeminiClient, LLMRanker
from finder.models import Product, RecommendationResult
from finder.scoring import local_recommend

logger = logging.getLogger(__name__)


class ProductRecommender:
    """
    Chooses between LLM ranking and local scoring for each query.

    The recommender holds no per-request state; one instance can serve
    concurrent requests.

    Usage:
        recommender = ProductRecommender(llm_ranker=LLMRanker(GeminiClient(key)))
        result = recommender.recommend("cheap apple phone 500", catalog)
        result.products, result.source
    """

    _instance: Optional['ProductRecommender'] = None

    def __init__(self, llm_ranker: Optional[LLMRanker] = None):
        """
        Args:
            llm_ranker: Ranker for the LLM path, or None for local-only ranking
        """
        self._llm_ranker = llm_ranker
        logger.info(
            "ProductRecommender initialized (%s)",
            "LLM + local fallback" if llm_ranker else "local only",
        )

    @classmethod
    def get_instance(cls) -> 'ProductRecommender':
        """Get the singleton instance built from LLM_CONFIG."""
        if cls._instance is None:
            cls._instance = cls.from_config()
        return cls._instance

    @classmethod
    def from_config(cls, llm_config: Optional[dict] = None) -> 'ProductRecommender':
        """
        Build a recommender from an LLM config dict.

        A missing api_key selects local-only ranking; that is not an error.
        """
        llm_config = llm_config if llm_config is not None else LLM_CONFIG
        api_key = llm_config.get("api_key")
        if not api_key:
            logger.info("No LLM API key configured, using local scorer only")
            return cls()

        client = GeminiClient(
            api_key=api_key,
            model=llm_config.get("model", LLM_CONFIG["model"]),
            timeout=llm_config.get("timeout", LLM_CONFIG["timeout"]),
        )
        return cls(llm_ranker=LLMRanker(client))

    @property
    def llm_enabled(self) -> bool:
        return self._llm_ranker is not None

    def recommend(self, query: str, catalog: Sequence[Product]) -> RecommendationResult:
        """
        Rank a catalog against a query.

        Expects already validated input: a string query and a list of
        Products (the HTTP layer rejects anything else).

        Args:
            query: Free-text user query
            catalog: Candidate products

        Returns:
            RecommendationResult with source "llm" or "local"
        """
        if self._llm_ranker is not None:
            try:
                products = self._llm_ranker.rank(query, catalog)
                return RecommendationResult(
                    products=products,
                    source="llm",
                    reasoning=f"AI found {len(products)} products matching your criteria.",
                )
            except Exception as e:
                # Any LLM failure (transport, timeout, unusable answer) means fallback
                logger.warning(f"LLM ranking failed, using local fallback: {e}")

        return self._local_result(query, catalog)

    def _local_result(self, query: str, catalog: Sequence[Product]) -> RecommendationResult:
        products = local_recommend(query, catalog)
        return RecommendationResult(
            products=products,
            source="local",
            reasoning=f"Found {len(products)} products matching your criteria using smart filtering.",
        )


def recommend(query: str, catalog: Sequence[Product]) -> List[Product]:
    """Rank with the configured singleton recommender and return the products."""
    return get_recommender().recommend(query, catalog).products


# Singleton accessor function
def get_recommender() -> ProductRecommender:
    """Get the singleton ProductRecommender instance."""
    return ProductRecommender.get_instance()
