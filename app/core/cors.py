from __future__ import annotations

from typing import Any

from app.core.config import settings

CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-API-Key"]


def cors_options() -> dict[str, Any]:
    """Keyword arguments for CORSMiddleware built from settings."""
    regex = (settings.cors_allow_origin_regex or "").strip()
    return {
        "allow_origins": list(settings.cors_allowed_origins),
        "allow_origin_regex": regex or None,
        "allow_credentials": settings.cors_allow_credentials,
        "allow_methods": CORS_ALLOWED_METHODS,
        "allow_headers": CORS_ALLOWED_HEADERS,
    }
