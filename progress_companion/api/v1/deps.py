"""Shared route dependencies: settings-derived policy, stores and the user context."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, HTTPException

from progress_companion.core.config import Settings, get_settings
from progress_companion.core.errors import MissingPrerequisite
from progress_companion.services.policy import AnalyticsPolicy
from progress_companion.services.records import UserContext
from progress_companion.services.stores import (
    ProfileReader,
    SampleStore,
    ScanStore,
    SqlProfileReader,
    SqlSampleStore,
    SqlScanStore,
)
from progress_companion.services.vision import HttpVisionProvider, VisionProvider


def get_policy(settings: Settings = Depends(get_settings)) -> AnalyticsPolicy:
    return AnalyticsPolicy.from_settings(settings)


def get_timezone(settings: Settings = Depends(get_settings)) -> ZoneInfo:
    return ZoneInfo(settings.local_timezone)


def get_sample_store() -> SampleStore:
    return SqlSampleStore()


def get_scan_store() -> ScanStore:
    return SqlScanStore()


def get_profile_reader() -> ProfileReader:
    return SqlProfileReader()


def get_vision_provider(settings: Settings = Depends(get_settings)) -> VisionProvider:
    return HttpVisionProvider.from_settings(settings)


async def get_user_context(
    tz: ZoneInfo = Depends(get_timezone),
    profiles: ProfileReader = Depends(get_profile_reader),
) -> UserContext:
    """Resolve the single user once per request."""
    try:
        return await profiles.get_user_context(datetime.now(tz))
    except MissingPrerequisite as e:
        raise HTTPException(status_code=404, detail=str(e))
