"""Analytics dashboard: metric graph and trends, body composition, nutrition, training, evolution."""

from __future__ import annotations

from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query

from progress_companion.api.v1.deps import get_policy, get_sample_store, get_timezone, get_user_context
from progress_companion.schemas.analytics import AnalyticsResponse, ChangeRead, EvolutionPointRead
from progress_companion.services.analytics import AnalyticsReport, load_report, resolve_metric, resolve_range
from progress_companion.services.evolution import load_evolution
from progress_companion.services.policy import AnalyticsPolicy
from progress_companion.services.records import UserContext
from progress_companion.services.stores import SampleStore

router = APIRouter()


def _to_response(report: AnalyticsReport) -> AnalyticsResponse:
    change = None
    if report.change is not None:
        change = ChangeRead(
            change=report.change.change_display,
            days=report.change.days,
            weekly_rate=report.change.weekly_rate_display,
            numeric_direction=report.change.numeric_direction,
            direction=report.change.direction,
        )
    return AnalyticsResponse.model_validate(
        {
            "metric": report.metric,
            "range_days": report.range_days,
            "graph_data": report.graph_data,
            "trend": report.trend,
            "recent_trend": report.recent_trend,
            "percent_change": round(report.percent_change, 2),
            "change": change,
            "body_composition": report.body_composition,
            "nutrition": report.nutrition,
            "training": report.training,
            "evolution": report.evolution,
        },
        from_attributes=True,
    )


@router.get("", response_model=AnalyticsResponse)
async def analytics_dashboard(
    range_key: Optional[str] = Query("30d", alias="range", description="7d, 30d or 90d"),
    metric: Optional[str] = Query("weight", description="weight, bodyFat, leanMass or a measurement type"),
    ctx: UserContext = Depends(get_user_context),
    store: SampleStore = Depends(get_sample_store),
    policy: AnalyticsPolicy = Depends(get_policy),
    tz: ZoneInfo = Depends(get_timezone),
):
    """
    Dashboard for one metric over the selected range.
    Unknown range falls back to 30 days, unknown metric to weight.
    """
    report = await load_report(ctx, store, resolve_metric(metric), resolve_range(range_key), policy, tz)
    return _to_response(report)


@router.get("/evolution", response_model=list[EvolutionPointRead])
async def evolution_timeline(
    ctx: UserContext = Depends(get_user_context),
    store: SampleStore = Depends(get_sample_store),
):
    """Twelve ~30-day buckets, oldest first, with the latest weight, body fat and lean mass in each."""
    points = await load_evolution(store, ctx)
    return [EvolutionPointRead.model_validate(p) for p in points]
