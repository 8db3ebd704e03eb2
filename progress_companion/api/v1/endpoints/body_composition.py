"""Body-composition scans: create from photos, history with trends, two-scan comparison."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from progress_companion.api.v1.deps import (
    get_policy,
    get_sample_store,
    get_scan_store,
    get_user_context,
    get_vision_provider,
)
from progress_companion.core.constants import ANALYSIS_FAILED, SCAN_DISCLAIMER
from progress_companion.core.errors import MalformedUpstreamResponse, ScanNotFound
from progress_companion.schemas.body_composition import (
    InsightRead,
    ScanComparisonResponse,
    ScanCreate,
    ScanCreateResponse,
    ScanHistoryResponse,
    ScanRead,
)
from progress_companion.services.body_composition import compare_scans, create_scan, summarize_history
from progress_companion.services.policy import AnalyticsPolicy
from progress_companion.services.records import ScanRecord, UserContext
from progress_companion.services.stores import SampleStore, ScanStore
from progress_companion.services.vision import PhotoSet, VisionProvider

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ScanHistoryResponse)
async def list_scans(
    limit: int = Query(10, ge=1, le=100, description="Most recent scans to return"),
    summary: bool = Query(False, description="Include the 30-day summary"),
    ctx: UserContext = Depends(get_user_context),
    scans: ScanStore = Depends(get_scan_store),
    policy: AnalyticsPolicy = Depends(get_policy),
):
    """Recent scans (newest first), body fat trend and optional monthly summary."""
    records = await scans.find_scans(ctx.user_id, limit=limit)
    history = summarize_history(records, ctx, include_summary=summary, policy=policy)
    return ScanHistoryResponse.model_validate(history)


@router.post("", response_model=ScanCreateResponse, status_code=201)
async def create_body_composition_scan(
    payload: ScanCreate,
    ctx: UserContext = Depends(get_user_context),
    samples: SampleStore = Depends(get_sample_store),
    scans: ScanStore = Depends(get_scan_store),
    vision: VisionProvider = Depends(get_vision_provider),
    policy: AnalyticsPolicy = Depends(get_policy),
):
    """
    Analyze progress photos and store the scan.
    An unreadable vision reply returns 400 and nothing is stored.
    """
    photos = PhotoSet(**payload.model_dump())
    try:
        record, assessment = await create_scan(ctx, photos, samples, scans, vision, policy)
    except MalformedUpstreamResponse:
        raise HTTPException(status_code=400, detail=ANALYSIS_FAILED)
    except Exception:
        logger.exception("Body composition scan failed")
        raise
    return ScanCreateResponse(
        scan=ScanRead.model_validate(record),
        insight=InsightRead.model_validate(assessment.insight),
        disclaimer=SCAN_DISCLAIMER,
    )


async def _get_scan(scans: ScanStore, ctx: UserContext, raw_id: str) -> ScanRecord:
    try:
        scan_id = uuid.UUID(raw_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid scan id")
    record = await scans.get_scan(ctx.user_id, scan_id)
    if record is None:
        raise ScanNotFound(f"Scan {scan_id} not found")
    return record


@router.get("/compare", response_model=ScanComparisonResponse)
async def compare_body_composition_scans(
    scan1: Optional[str] = Query(None, description="First scan id"),
    scan2: Optional[str] = Query(None, description="Second scan id"),
    ctx: UserContext = Depends(get_user_context),
    scans: ScanStore = Depends(get_scan_store),
    policy: AnalyticsPolicy = Depends(get_policy),
):
    """Compare two scans in either order; the earlier one is the baseline."""
    if not scan1 or not scan2:
        raise HTTPException(status_code=400, detail="Both scan IDs required")
    try:
        first = await _get_scan(scans, ctx, scan1)
        second = await _get_scan(scans, ctx, scan2)
    except ScanNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ScanComparisonResponse.model_validate(compare_scans(first, second, ctx, policy))
