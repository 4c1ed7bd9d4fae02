"""
Health endpoint for the command center service.

Exposes a dependency-free liveness check at "/health" returning a static "ok"
status and the current UTC time in ISO-8601 format.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health() -> Dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
