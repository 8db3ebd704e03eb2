"""Insights: which inputs would most improve confidence next."""

from __future__ import annotations

from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from progress_companion.api.v1.deps import get_sample_store, get_scan_store, get_timezone, get_user_context
from progress_companion.schemas.signals import DataQualityRead, RecommendedInputRead, SignalsResponse
from progress_companion.services.records import UserContext
from progress_companion.services.signal_composer import compose_signals, load_availability
from progress_companion.services.stores import SampleStore, ScanStore

router = APIRouter()


@router.get("/signals", response_model=SignalsResponse)
async def recommended_signals(
    ctx: UserContext = Depends(get_user_context),
    samples: SampleStore = Depends(get_sample_store),
    scans: ScanStore = Depends(get_scan_store),
    tz: ZoneInfo = Depends(get_timezone),
):
    """Top three data gaps ranked by confidence improvement, plus overall data quality."""
    availability = await load_availability(ctx, samples, scans, tz)
    plan = compose_signals(availability, ctx.now)
    return SignalsResponse(
        recommended_inputs=[
            RecommendedInputRead(
                rank=r.rank,
                type=r.gap.type,
                description=r.gap.description,
                confidence_improvement=r.gap.confidence_improvement,
                effort=r.gap.effort,
                action=r.gap.action,
                rationale=r.rationale,
            )
            for r in plan.recommended
        ],
        total_potential_improvement=plan.total_potential_improvement,
        data_quality=DataQualityRead(score=plan.data_quality.score, level=plan.data_quality.level),
    )
