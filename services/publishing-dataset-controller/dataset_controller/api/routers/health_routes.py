# services/publishing-dataset-controller/dataset_controller/api/routers/health_routes.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from dataset_controller.config import settings

logger = logging.getLogger("dataset_controller.api.health")

router = APIRouter(tags=["meta"])


@router.get("/health", summary="Liveness probe")
def health() -> Dict[str, Any]:
    """
    Liveness probe: process is up and app is constructed.
    """
    return {
        "status": "ok",
        "service": settings.service_name,
        "at": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/version", summary="Service version")
def version() -> Dict[str, Any]:
    return {
        "service": settings.service_name,
        "version": settings.service_version,
    }
