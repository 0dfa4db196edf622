"""
Test Suite for the Flask API.

Covers request validation, the recommendation endpoint (local and LLM
paths), the catalog filter endpoint and the health check.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from api.app import create_app
from finder.llm_ranker import LLMClient, LLMRanker
from finder.recommender import ProductRecommender


# =============================================================================
# TEST DATA
# =============================================================================

PRODUCTS = [
    {"id": 1, "name": "iPhone 14", "price": 799, "category": "smartphones",
     "brand": "Apple", "rating": 4.8, "description": "Latest iPhone"},
    {"id": 2, "name": "Pixel 7", "price": 449, "category": "smartphones",
     "brand": "Google", "rating": 4.6},
    {"id": 6, "name": "Sony WH-1000XM5", "price": 349, "category": "headphones",
     "brand": "Sony", "rating": 4.8},
]


class _StaticClient(LLMClient):
    def __init__(self, response):
        self.response = response

    def generate(self, prompt, model=None):
        return self.response


class _BrokenClient(LLMClient):
    def generate(self, prompt, model=None):
        raise PermissionError("API key rejected")


def _client_for(recommender):
    app = create_app(recommender=recommender)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def client():
    """Test client backed by a local-only recommender."""
    return _client_for(ProductRecommender())


# =============================================================================
# TEST: VALIDATION
# =============================================================================

class TestValidation:
    """Tests for request validation on /api/recommend."""

    @pytest.mark.parametrize("body", [
        {"products": PRODUCTS},
        {"query": "", "products": PRODUCTS},
        {"query": "phone"},
        {"query": "phone", "products": "not a list"},
        {"query": "phone", "products": None},
    ])
    def test_missing_query_or_products(self, client, body):
        response = client.post("/api/recommend", json=body)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Missing query or products"}

    def test_non_json_body(self, client):
        response = client.post("/api/recommend", data="query=phone")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Missing query or products"

    def test_invalid_product(self, client):
        response = client.post("/api/recommend", json={
            "query": "phone",
            "products": [{"id": 1, "name": "No price"}],
        })
        assert response.status_code == 400
        assert response.get_json()["error"].startswith("Invalid product")

    @pytest.mark.parametrize("bad_id", ["--5", "\u00b2", "abc"])
    def test_malformed_id_is_client_error(self, client, bad_id):
        """A bad id is a 400, never a server error."""
        response = client.post("/api/recommend", json={
            "query": "phone",
            "products": [{"id": bad_id, "name": "x", "price": 1}],
        })
        assert response.status_code == 400
        assert response.get_json()["error"].startswith("Invalid product")

    def test_invalid_filters(self, client):
        response = client.post("/api/recommend", json={
            "query": "phone",
            "products": PRODUCTS,
            "filters": {"price_range": "cheap"},
        })
        assert response.status_code == 400
        assert response.get_json()["error"].startswith("Invalid filters")

    def test_get_not_allowed(self, client):
        response = client.get("/api/recommend")
        assert response.status_code == 405
        assert response.get_json() == {"error": "Method not allowed"}


# =============================================================================
# TEST: RECOMMENDATIONS
# =============================================================================

class TestRecommendEndpoint:
    """Tests for POST /api/recommend."""

    def test_local_recommendations(self, client):
        response = client.post("/api/recommend", json={
            "query": "cheap apple phone 500",
            "products": PRODUCTS,
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data["source"] == "local"
        assert [p["id"] for p in data["recommendations"]] == [2, 6]

    def test_extra_fields_returned(self, client):
        response = client.post("/api/recommend", json={
            "query": "iphone",
            "products": PRODUCTS,
        })
        first = response.get_json()["recommendations"][0]
        assert first == PRODUCTS[0]

    def test_empty_catalog_is_success(self, client):
        response = client.post("/api/recommend", json={"query": "phone", "products": []})
        assert response.status_code == 200
        assert response.get_json()["recommendations"] == []

    def test_filters_applied_before_ranking(self, client):
        response = client.post("/api/recommend", json={
            "query": "phone",
            "products": PRODUCTS,
            "filters": {"category": "headphones"},
        })
        assert [p["id"] for p in response.get_json()["recommendations"]] == [6]

    def test_llm_path(self):
        client = _client_for(ProductRecommender(llm_ranker=LLMRanker(_StaticClient("[6, 2]"))))
        response = client.post("/api/recommend", json={"query": "gift", "products": PRODUCTS})
        data = response.get_json()
        assert response.status_code == 200
        assert data["source"] == "llm"
        assert [p["id"] for p in data["recommendations"]] == [2, 6]

    def test_llm_failure_is_not_a_server_error(self):
        """A broken LLM degrades to local results with a 200."""
        client = _client_for(ProductRecommender(llm_ranker=LLMRanker(_BrokenClient())))
        response = client.post("/api/recommend", json={"query": "headphones", "products": PRODUCTS})
        data = response.get_json()
        assert response.status_code == 200
        assert data["source"] == "local"
        assert data["recommendations"][0]["id"] == 6


# =============================================================================
# TEST: FILTER ENDPOINT & HEALTH
# =============================================================================

class TestFilterEndpoint:
    """Tests for POST /api/products/filter."""

    def test_filter_products(self, client):
        response = client.post("/api/products/filter", json={
            "products": PRODUCTS,
            "filters": {"min_rating": 4.7},
        })
        data = response.get_json()
        assert response.status_code == 200
        assert data["count"] == 2
        assert [p["id"] for p in data["products"]] == [1, 6]

    def test_filter_requires_products(self, client):
        response = client.post("/api/products/filter", json={"filters": {}})
        assert response.status_code == 400


class TestHealth:
    """Tests for GET /health."""

    def test_health_local_only(self, client):
        response = client.get("/health")
        data = response.get_json()
        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["llm_enabled"] is False

    def test_unknown_route(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
