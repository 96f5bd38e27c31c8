"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.schemas import (
    AverageResponse,
    HistoryResponse,
    RefreshResponse,
    TrendsResponse,
    WeatherReading,
    WindowResponse,
)
from services.weather import WeatherService, build_default_service

router = APIRouter()


def get_service() -> WeatherService:
    return build_default_service()


@router.post(
    "/readings/refresh",
    response_model=RefreshResponse,
    summary="Pull a reading from the station, falling back to mock data.",
)
async def refresh_reading(
    service: WeatherService = Depends(get_service),
) -> RefreshResponse:
    outcome = await service.refresh()
    return RefreshResponse(
        reading=outcome.reading,
        is_mock=outcome.is_mock,
        notice=outcome.notice,
        persisted=outcome.persisted,
    )


@router.post(
    "/readings",
    status_code=status.HTTP_201_CREATED,
    response_model=WeatherReading,
    summary="Record a reading supplied by the caller.",
)
async def record_reading(
    reading: WeatherReading,
    service: WeatherService = Depends(get_service),
) -> WeatherReading:
    return service.record(reading).reading


@router.get(
    "/readings",
    response_model=HistoryResponse,
    summary="Full retained history, newest first.",
)
async def list_readings(
    service: WeatherService = Depends(get_service),
) -> HistoryResponse:
    readings = service.history()
    return HistoryResponse(count=len(readings), readings=readings)


@router.get(
    "/readings/latest",
    response_model=WeatherReading,
    summary="Most recent stored reading.",
)
async def latest_reading(
    service: WeatherService = Depends(get_service),
) -> WeatherReading:
    reading = service.latest()
    if reading is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No readings recorded yet.",
        )
    return reading


@router.get(
    "/readings/window",
    response_model=WindowResponse,
    summary="Readings recorded within the last N hours.",
)
async def readings_in_window(
    hours: float = Query(24.0, gt=0, description="Window length in hours."),
    service: WeatherService = Depends(get_service),
) -> WindowResponse:
    readings = service.window(hours)
    return WindowResponse(hours=hours, count=len(readings), readings=readings)


@router.get(
    "/readings/average",
    response_model=AverageResponse,
    summary="Average of every numeric field over the last N hours.",
)
async def average_readings(
    hours: float = Query(24.0, gt=0, description="Window length in hours."),
    service: WeatherService = Depends(get_service),
) -> AverageResponse:
    return AverageResponse(hours=hours, average=service.average(hours))


@router.get(
    "/readings/trends",
    response_model=TrendsResponse,
    summary="Hourly-sampled series with trend direction per charted field.",
)
async def reading_trends(
    hours: int = Query(24, ge=1, le=168, description="Number of hourly slots."),
    service: WeatherService = Depends(get_service),
) -> TrendsResponse:
    return service.trends(hours)


@router.delete(
    "/readings",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove all stored readings.",
)
async def clear_readings(
    service: WeatherService = Depends(get_service),
) -> Response:
    service.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


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
    return {"status": "ok", "detail": "See /ui for the dashboard and /health for service status."}
