"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.schemas import DashboardResult
from services.dashboard import DashboardService, build_default_service
from services.errors import DashboardNotLoadedError, RetrievalError, SourceFormatError

router = APIRouter()


def get_service() -> DashboardService:
    return build_default_service()


@router.get(
    "/dashboard",
    response_model=DashboardResult,
    summary="Fetch the latest aggregated PM2.5 dashboard data.",
)
async def get_dashboard(
    service: DashboardService = Depends(get_service),
) -> DashboardResult:
    try:
        return service.current()
    except DashboardNotLoadedError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


@router.post(
    "/dashboard/reload",
    response_model=DashboardResult,
    summary="Re-fetch the configured source and publish fresh statistics.",
)
async def reload_dashboard(
    service: DashboardService = Depends(get_service),
) -> DashboardResult:
    try:
        return await service.load()
    except RetrievalError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    except SourceFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


@router.post(
    "/dashboard/aggregate",
    response_model=DashboardResult,
    summary="Aggregate an uploaded CSV without publishing it.",
)
async def aggregate_upload(
    file: UploadFile = File(..., description="Semicolon-delimited CSV of daily readings."),
    service: DashboardService = Depends(get_service),
) -> DashboardResult:
    contents = await file.read()
    await file.close()
    if not contents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    try:
        text = contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is not valid UTF-8.",
        ) from exc

    try:
        return service.build(text, file.filename or "upload.csv")
    except SourceFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
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
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /dashboard for PM2.5 statistics."}
