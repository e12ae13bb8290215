"""Urgency listing endpoints for dashboards."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...calendars import to_school_time
from ...engine import classify
from ...models import Case, UrgencyTier
from ...service import CaseService
from ..schemas.responses import CaseSummary
from .cases import get_service

router = APIRouter(tags=["Urgency"])


def to_summary(case: Case, now: datetime) -> CaseSummary:
    return CaseSummary(
        id=case.id,
        subject_name=case.subject_name,
        severity=case.severity.value,
        stage=case.stage.value,
        fatal_deadline=case.fatal_deadline.isoformat(),
        tier=classify(now, case.fatal_deadline).value,
    )


@router.get("/urgent", response_model=list[CaseSummary])
async def list_urgent(
    tier: list[UrgencyTier] = Query(..., description="One or more tiers"),
    now: Optional[datetime] = None,
    service: CaseService = Depends(get_service),
):
    """
    Open cases in the given urgency tiers, soonest deadline first.

    Example: /urgent?tier=critical&tier=expired
    """
    now = to_school_time(now) if now else datetime.now()
    return [to_summary(c, now) for c in service.list_urgent(None, now, tier)]


@router.get("/alerts", response_model=list[CaseSummary])
async def list_alerts(
    now: Optional[datetime] = None,
    service: CaseService = Depends(get_service),
):
    """Open cases that are critical or expired."""
    now = to_school_time(now) if now else datetime.now()
    return [to_summary(c, now) for c in service.list_alerts(now)]
