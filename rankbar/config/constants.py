"""
Centralized constants for rankbar.

Thresholds, limits, routes and environment variable definitions used by the
command palette engine and the API client.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

RANKBAR_CONFIG_DIR = Path(
    os.environ.get("RANKBAR_CONFIG_DIR", Path.home() / ".config" / "rankbar")
)
LOG_FILE_NAME = "rankbar.log"

# =============================================================================
# INPUT CLASSIFICATION
# =============================================================================

AI_MIN_LENGTH = 20  # Trimmed input longer than this reads as a free-text request
FALLBACK_IDEAS_MIN_LENGTH = 3  # Unmatched search text longer than this can ask for ideas

# =============================================================================
# STREAMING RESULT LIMITS
# =============================================================================

MAX_QUICK_WINS = 3  # Quick-win suggestions shown after a site analysis
MAX_IDEAS = 5  # Content ideas shown after idea generation
DEFAULT_IDEA_COUNT = 5  # Ideas requested from the generator
GOOD_SCORE_THRESHOLD = 70  # Score (0-100) at which a dimension reads as healthy
PROGRESS_PAUSE_SECONDS = 0.3  # Pause between "connecting" and "crawling" progress

# Display labels and (good, needs work) subtitles per scoring dimension
SCORE_DIMENSIONS = {
    "seo": ("SEO", "Good foundation!", "Room for improvement"),
    "geo": ("GEO", "AI-friendly content!", "Optimize for generative engines"),
}
DEFAULT_SCORE_SUBTITLES = ("Looking good!", "Room for improvement")

# =============================================================================
# API
# =============================================================================

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_API_TIMEOUT_SECONDS = 60.0

ANALYZE_ENDPOINT = "/api/onboarding/analyze"
GENERATE_ENDPOINT = "/api/ai/generate"
SITES_ENDPOINT = "/api/sites"

# =============================================================================
# ROUTES
# =============================================================================

ROUTE_DASHBOARD = "/dashboard"
ROUTE_CONTENT = "/content"
ROUTE_CONTENT_NEW = "/content/new"
ROUTE_SETTINGS = "/settings"
ROUTE_AUDIT = "/audit"
ROUTE_KEYWORDS = "/keywords"
ROUTE_GEO = "/geo"
ROUTE_SITES = "/sites"
ROUTE_SITE_STRATEGY = "/sites/{site_id}/strategy"

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "RANKBAR_API_URL": {
        "description": "Base URL of the analysis API",
        "default": DEFAULT_API_URL,
        "valid_values": None,
    },
    "RANKBAR_API_TOKEN": {
        "description": "Bearer token sent to the analysis API",
        "default": None,
        "valid_values": None,
        "sensitive": True,
    },
    "RANKBAR_API_TIMEOUT": {
        "description": "Seconds to wait for an API response",
        "default": str(DEFAULT_API_TIMEOUT_SECONDS),
        "valid_values": None,
    },
    "RANKBAR_LOG_LEVEL": {
        "description": "Log level for rankbar loggers",
        "default": "warning",
        "valid_values": ["debug", "info", "warning", "error"],
    },
    "RANKBAR_CONFIG_DIR": {
        "description": "Directory for rankbar logs and state",
        "default": None,
        "valid_values": None,
    },
}
