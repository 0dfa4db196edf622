"""
Flask API for the AI Product Finder.

This module provides the REST API endpoints:
- GET /health - Health check
- POST /api/recommend - Rank a caller-supplied catalog against a query
- POST /api/products/filter - Apply sidebar filters to a catalog

The API is stateless: every request carries its own catalog. Ranking is
delegated to the recommender, which tries Gemini first and falls back to
the local scorer, so LLM problems never produce a 5xx.
"""

import logging
import time
from functools import wraps
from typing import Any, List, Optional, Tuple

from flask import Flask, request, jsonify
from flask_cors import CORS

from config import API_CONFIG, LOGGING_CONFIG
from finder.exceptions import InvalidFilterError, InvalidProductError
from finder.filters import apply_catalog_filters
from finder.models import Product, parse_catalog
from finder.recommender import ProductRecommender, get_recommender

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOGGING_CONFIG["level"].upper(), logging.INFO),
    format=LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)

MISSING_INPUT_ERROR = "Missing query or products"


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def create_app(recommender: Optional[ProductRecommender] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        recommender: Recommender to serve requests with; defaults to the
            singleton built from LLM_CONFIG

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    # Storefront frontends call the API cross-origin
    CORS(app, resources={
        r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    def _recommender() -> ProductRecommender:
        return recommender if recommender is not None else get_recommender()

    # Request timing decorator
    def timed_request(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            start_time = time.time()
            response = f(*args, **kwargs)
            elapsed_ms = (time.time() - start_time) * 1000
            logger.info(f"{request.method} {request.path} completed in {elapsed_ms:.2f}ms")
            return response
        return decorated_function

    def _read_catalog(data: Any) -> Tuple[Optional[List[Product]], Optional[tuple]]:
        """Parse ``products`` from the body, or return an error response."""
        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            return None, _error(MISSING_INPUT_ERROR, 400)
        try:
            return parse_catalog(products), None
        except InvalidProductError as e:
            return None, _error(f"Invalid product: {e}", 400)

    # Error handlers
    @app.errorhandler(400)
    def bad_request(error):
        return _error(str(error.description), 400)

    @app.errorhandler(404)
    def not_found(error):
        return _error("The requested resource was not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal error: {error}")
        return _error("Failed to generate recommendations", 500)

    # ==========================================================================
    # HEALTH CHECK ENDPOINT
    # ==========================================================================

    @app.route("/health", methods=["GET"])
    @timed_request
    def health_check():
        """
        Health check endpoint.

        Example:
            GET /health
            Response: {"status": "healthy", "llm_enabled": false, "timestamp": 1700000000.0}
        """
        return jsonify({
            "status": "healthy",
            "llm_enabled": _recommender().llm_enabled,
            "timestamp": time.time()
        }), 200

    # ==========================================================================
    # RECOMMENDATIONS ENDPOINT
    # ==========================================================================

    @app.route("/api/recommend", methods=["POST"])
    @timed_request
    def get_recommendations():
        """
        Rank the supplied catalog against a free-text query.

        Request Body:
        {
            "query": "cheap apple phone 500",
            "products": [
                {"id": 1, "name": "iPhone 14", "price": 799,
                 "category": "smartphones", "brand": "Apple"},
                ...
            ],
            "filters": {"category": "smartphones", "price_range": [0, 1000]}  // optional
        }

        Returns:
            JSON with ranked products

        Example Response:
        {
            "recommendations": [{"id": 2, "name": "Pixel 7", ...}],
            "reasoning": "Found 1 products matching your criteria using smart filtering.",
            "source": "local"
        }
        """
        data = request.get_json(silent=True) or {}

        query = data.get("query") if isinstance(data, dict) else None
        if not query:
            return _error(MISSING_INPUT_ERROR, 400)

        catalog, error_response = _read_catalog(data)
        if error_response:
            return error_response

        try:
            catalog = apply_catalog_filters(catalog, data.get("filters"))
        except InvalidFilterError as e:
            return _error(f"Invalid filters: {e}", 400)

        result = _recommender().recommend(str(query), catalog)
        logger.info(
            f"Returning {len(result.products)} recommendations ({result.source})"
        )
        return jsonify(result.to_dict()), 200

    # ==========================================================================
    # CATALOG FILTER ENDPOINT
    # ==========================================================================

    @app.route("/api/products/filter", methods=["POST"])
    @timed_request
    def filter_products():
        """
        Apply category, brand, price range and rating filters to a catalog.

        Request Body:
        {
            "products": [...],
            "filters": {"brand": "Apple", "min_rating": 4.5}
        }

        Returns:
            JSON with the products that passed, in catalog order
        """
        data = request.get_json(silent=True) or {}

        catalog, error_response = _read_catalog(data)
        if error_response:
            return error_response

        try:
            filtered = apply_catalog_filters(catalog, data.get("filters"))
        except InvalidFilterError as e:
            return _error(f"Invalid filters: {e}", 400)

        return jsonify({
            "products": [p.to_dict() for p in filtered],
            "count": len(filtered)
        }), 200

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    """Run the Flask development server."""
    logger.info("Starting AI Product Finder API...")
    logger.info(f"Server: http://{API_CONFIG['host']}:{API_CONFIG['port']}")

    app.run(
        host=API_CONFIG["host"],
        port=API_CONFIG["port"],
        debug=API_CONFIG["debug"]
    )
