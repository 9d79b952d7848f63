"""HTTP route definitions for the exporter."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST

from app.schemas import ReadingSnapshot
from services.device_client import DeviceFetchError
from services.prober import ProbeService, build_default_probe_service

router = APIRouter()

MISSING_TARGET_DETAIL = "Target parameter is missing"


def get_probe_service() -> ProbeService:
    return build_default_probe_service()


def _require_target(target: Optional[str]) -> str:
    if target is None or not target.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MISSING_TARGET_DETAIL,
        )
    return target.strip()


# Sync handlers run on the FastAPI threadpool; the device fetch blocks.
@router.get(
    "/probe",
    summary="Scrape one plug and return Prometheus metrics.",
    response_class=Response,
)
def probe(
    target: Optional[str] = Query(None, description="Device address as host[:port]."),
    service: ProbeService = Depends(get_probe_service),
) -> Response:
    outcome = service.probe(_require_target(target))
    return Response(content=outcome.exposition, media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/reading",
    response_model=ReadingSnapshot,
    summary="Decode one plug's status page as JSON without updating metrics.",
)
def reading(
    target: Optional[str] = Query(None, description="Device address as host[:port]."),
    service: ProbeService = Depends(get_probe_service),
) -> ReadingSnapshot:
    try:
        return service.read(_require_target(target))
    except DeviceFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to query target {exc.target}: {exc.reason}",
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Landing endpoint pointing at the probe route.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "Scrape /probe?target=<host:port>; see /health."}
