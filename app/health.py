"""Health check endpoints."""

import re
from typing import Any

from .config import settings
from .services.errors import ReconciliationError
from .services.matching.rules import load_rules


def check_rules() -> dict[str, Any]:
    """Check the configured rule set loads."""
    try:
        rules = load_rules()
    except (OSError, ValueError, KeyError, re.error, ReconciliationError) as e:
        return {"status": "unhealthy", "error": str(e)}
    return {
        "status": "healthy",
        "source": settings.rules_file or "built-in",
        "known_vendors": len(rules.known_vendors),
        "gl_rules": len(rules.gl_accounts),
    }


def get_health_status() -> dict[str, Any]:
    """Get overall health status."""
    rules = check_rules()
    return {
        "status": "healthy" if rules["status"] == "healthy" else "degraded",
        "services": {"rules": rules},
    }
