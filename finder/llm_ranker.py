"""
LLM Ranker for the AI Product Finder.

Asks a hosted model (Google Gemini) to pick the product ids that match a
query, then maps those ids back onto the caller's catalog.

Any failure here (transport, auth, rate limit, timeout, unparseable or
empty answer) surfaces as an exception; the recommender catches it and
falls back to the local scorer.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import google.generativeai as genai

from config import LLM_CONFIG, LLM_PROMPT_TEMPLATE
from finder.exceptions import LLMRankingError
from finder.models import Product

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"\d+")


def _is_integer(value) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


class LLMClient(ABC):
    """Text-in, text-out interface to a hosted language model."""

    @abstractmethod
    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        """
        Send a prompt and return the response text.

        Raises on any network, auth, rate-limit or timeout failure.
        """
        raise NotImplementedError


class GeminiClient(LLMClient):
    """Client for Google Generative AI (Gemini) via google-generativeai."""

    def __init__(
        self,
        api_key: str,
        model: str = LLM_CONFIG["model"],
        timeout: float = LLM_CONFIG["timeout"],
    ) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY/GOOGLE_API_KEY not provided")
        self.model_name = model
        self.timeout = timeout
        genai.configure(api_key=api_key)

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        model_name = model or self.model_name
        logger.debug("Sending prompt to Gemini (%s): %s", model_name, prompt[:200])
        response = genai.GenerativeModel(model_name).generate_content(
            prompt,
            request_options={"timeout": self.timeout},
        )
        return response.text


def build_prompt(query: str, catalog: Sequence[Product]) -> str:
    """
    Build the ranking prompt.

    The query is embedded verbatim and the catalog is serialized as JSON
    with every product field (id, name, price, category, brand, extras).
    """
    catalog_json = json.dumps([p.to_dict() for p in catalog], default=str)
    return LLM_PROMPT_TEMPLATE.format(query=query, catalog=catalog_json)


def parse_product_ids(text: str) -> List[int]:
    """
    Parse the model's answer into product ids.

    Strategy:
    1. Parse the whole response as JSON; a list of integers is used as is
    2. Otherwise (bad JSON, JSON that is not a list, or a list with any
       non-integer member such as ``["2", "5"]``) collect every integer
       substring in the raw text

    Args:
        text: Raw model response

    Returns:
        Product ids in response order (may be empty)

    Example:
        >>> parse_product_ids("[2, 5, 9]")
        [2, 5, 9]
        >>> parse_product_ids("```json\\n[3, 4]\\n```")
        [3, 4]
    """
    if not text:
        return []

    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None

    if isinstance(parsed, list) and all(_is_integer(v) for v in parsed):
        return [int(v) for v in parsed]

    logger.debug("LLM response is not a JSON list of integers, scanning for integers")
    return [int(m) for m in _INTEGER_RE.findall(text)]


class LLMRanker:
    """
    Ranks a catalog by asking an LLM for matching product ids.

    Usage:
        ranker = LLMRanker(GeminiClient(api_key="..."))
        products = ranker.rank("cheap apple phone", catalog)
    """

    def __init__(self, client: LLMClient, model: Optional[str] = None):
        self.client = client
        self.model = model

    def rank(self, query: str, catalog: Sequence[Product]) -> List[Product]:
        """
        Return the catalog products the model selected.

        Selected products keep their catalog order, not the order the
        model listed them in.

        Raises:
            LLMRankingError: If no catalog product matches the returned ids
            Exception: Whatever the client raises on transport failure
        """
        prompt = build_prompt(query, catalog)
        text = self.client.generate(prompt, model=self.model)

        selected_ids = set(parse_product_ids(text))
        selected = [p for p in catalog if p.id in selected_ids]

        if not selected:
            raise LLMRankingError(
                f"LLM response matched no catalog products: {text[:200]!r}"
            )

        logger.info(f"LLM ranker selected {len(selected)} of {len(catalog)} products")
        return selected
