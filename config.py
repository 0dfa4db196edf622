"""
Configuration for the AI Product Finder.

This file contains all configuration constants including:
- LLM (Gemini) credentials, model and timeout
- Query synonym expansions used by the local scorer
- Budget detection pattern and result limits
- API and logging settings
"""

import os

from dotenv import load_dotenv

# Pick up GEMINI_API_KEY etc. from a local .env when present
load_dotenv()


# =============================================================================
# LLM CONFIGURATION
# Presence of an API key selects the LLM ranking path; absence means
# local-only ranking and is never an error.
# =============================================================================

LLM_CONFIG = {
    "api_key": os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
    "model": os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
    "timeout": float(os.getenv("LLM_TIMEOUT_SECONDS", 15)),
}

# Instruction appended to the prompt sent to the model
LLM_PROMPT_TEMPLATE = (
    "You are a product recommendation assistant.\n"
    'User query: "{query}"\n'
    "Available products: {catalog}\n"
    "Return ONLY a JSON array of product IDs that best match the query, "
    "like: [2, 5, 9]. Limit to 3-5 IDs."
)


# =============================================================================
# QUERY SYNONYM EXPANSIONS
# Trigger term -> terms added to the query term set. Applied once against the
# raw query terms; added terms never trigger further expansion.
# =============================================================================

SYNONYM_EXPANSIONS = {
    "iphone": ("apple", "phone"),
    "earbuds": ("headphones",),
    "earbud": ("headphones",),
    "tv": ("television",),
}


# =============================================================================
# LOCAL SCORING PARAMETERS
# =============================================================================

# First standalone run of 2-5 digits in the raw query is read as the budget
BUDGET_PATTERN = r"\b(\d{2,5})\b"

# Score weights per matching query term
SCORE_WEIGHTS = {
    "text_match": 2,       # term is a substring of "name brand category"
    "category_match": 3,   # term equals the category exactly
    "brand_match": 2,      # term equals the brand exactly
}

# Fixed cap on the number of recommendations returned
MAX_RECOMMENDATIONS = 10


# =============================================================================
# API CONFIGURATION
# =============================================================================

API_CONFIG = {
    "host": os.getenv("FLASK_HOST", "0.0.0.0"),
    "port": int(os.getenv("FLASK_PORT", 5000)),
    "debug": os.getenv("FLASK_DEBUG", "false").lower() == "true",
}


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
