from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.schemas import Trend, WeatherReading
from services.weather import WeatherService, build_default_service
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@dataclass(frozen=True)
class GaugeSpec:
    title: str
    field: str
    unit: str
    minimum: float
    maximum: float
    decimals: int = 1


@dataclass(frozen=True)
class Gauge:
    spec: GaugeSpec
    value: float
    percent: float

    @property
    def display(self) -> str:
        return f"{self.value:.{self.spec.decimals}f}"


@dataclass(frozen=True)
class Bar:
    label: str
    value: float
    height: float


@dataclass(frozen=True)
class Chart:
    title: str
    unit: str
    bars: List[Bar]
    current: Optional[float]
    trend: Trend


GAUGES = (
    GaugeSpec("Temperature", "temperature", "°C", -10, 40),
    GaugeSpec("Humidity", "humidity", "%", 0, 100),
    GaugeSpec("Pressure", "pressure", "hPa", 980, 1030),
    GaugeSpec("Dew Point", "dew_point", "°C", -10, 30),
    GaugeSpec("Gas Sensor", "gas", "kΩ", 0, 200),
    GaugeSpec("Cloud Base", "cloud_base", "m", 0, 3000, decimals=0),
)

CHARTS = (
    ("Temperature", "temperature", "°C"),
    ("Humidity", "humidity", "%"),
    ("Pressure", "pressure", "hPa"),
    ("Rainfall", "rainfall", "mm"),
)


def gauge_percent(value: float, minimum: float, maximum: float) -> float:
    """Fraction of the gauge arc to fill, clamped to [0, 1]."""
    span = maximum - minimum
    if span <= 0:
        return 0.0
    return min(max((value - minimum) / span, 0.0), 1.0)


def build_gauges(reading: WeatherReading) -> List[Gauge]:
    gauges = []
    for spec in GAUGES:
        value = getattr(reading, spec.field)
        gauges.append(
            Gauge(spec=spec, value=value, percent=gauge_percent(value, spec.minimum, spec.maximum))
        )
    return gauges


def build_charts(
    points: Sequence[WeatherReading], trends: dict[str, Trend]
) -> List[Chart]:
    charts = []
    for title, field, unit in CHARTS:
        values = [getattr(point, field) for point in points]
        low = min(values, default=0.0)
        value_range = (max(values, default=0.0) - low) or 1.0
        bars = [
            Bar(
                label=point.timestamp.strftime("%H:%M") if point.timestamp else "",
                value=value,
                height=(value - low) / value_range,
            )
            for point, value in zip(points, values)
        ]
        charts.append(
            Chart(
                title=title,
                unit=unit,
                bars=bars,
                current=values[-1] if values else None,
                trend=trends.get(field, Trend.stable),
            )
        )
    return charts


def get_service() -> WeatherService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: WeatherService = Depends(get_service),
) -> HTMLResponse:
    latest = service.latest()
    trends = service.trends(24)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "latest": latest,
            "gauges": build_gauges(latest) if latest else [],
            "charts": build_charts(trends.points, trends.trends) if trends.points else [],
            "history_count": len(service.history()),
            "refresh_seconds": int(get_settings().poll_interval) or None,
            "notice": request.query_params.get("notice"),
        },
    )


@router.post("/ui/refresh", name="ui_refresh")
async def ui_refresh(
    request: Request,
    service: WeatherService = Depends(get_service),
) -> RedirectResponse:
    outcome = await service.refresh()
    target = request.url_for("ui_index")
    if outcome.notice:
        target = target.include_query_params(notice=outcome.notice)
    return RedirectResponse(str(target), status_code=status.HTTP_303_SEE_OTHER)
