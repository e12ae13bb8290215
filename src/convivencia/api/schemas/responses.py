"""Response schemas for the API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class MilestoneResponse(BaseModel):
    """A procedural milestone."""
    id: str
    title: str
    description: str
    due_date: Optional[str] = None
    completed: bool
    completed_on: Optional[str] = None
    requires_evidence: bool
    mandatory_for_expulsion: bool
    notes: list[str]


class TransitionResponse(BaseModel):
    """An accepted stage transition."""
    from_stage: str
    to_stage: str
    kind: str  # forward|backward_override|closure
    reason: str
    at: Optional[str] = None


class CaseResponse(BaseModel):
    """Full state of a case."""
    id: str
    subject_name: str
    severity: str
    stage: str
    opened_at: str
    fatal_deadline: str
    prior_remedial_actions_recorded: bool
    is_closed: bool
    version: int
    milestones: list[MilestoneResponse]
    history: list[TransitionResponse]


class CaseSummary(BaseModel):
    """Case row in urgency listings."""
    id: str
    subject_name: str
    severity: str
    stage: str
    fatal_deadline: str
    tier: str


class UrgencyResponse(BaseModel):
    """Urgency of one case. Closed cases have no tier."""
    case_id: str
    tier: Optional[str] = None  # expired|critical|warning|normal
    is_alert: bool = False
    fatal_deadline: str
    hours_remaining: Optional[float] = None
    days_remaining: Optional[int] = None
    business_days_remaining: Optional[int] = None
    overdue_milestones: list[str] = []


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    storage: str
    open_cases: int
    allow_backward_transitions: bool
