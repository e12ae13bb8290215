"""Request schemas for the API."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class OpenCaseRequest(BaseModel):
    """Request to open a disciplinary case."""
    subject_name: str = Field(..., min_length=1, description="Student the case concerns")
    severity: str = Field(..., description="minor|relevant|serious_expulsion (legacy labels accepted)")
    opened_at: datetime = Field(..., description="Opening timestamp (ISO 8601)")
    prior_remedial_actions_recorded: bool = Field(
        default=False,
        description="A prior written warning and a psychosocial support plan are on file",
    )
    case_id: Optional[str] = Field(default=None, description="Explicit case ID; generated when omitted")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "subject_name": "Student Name",
                    "severity": "serious_expulsion",
                    "opened_at": "2025-05-09T10:00:00",
                    "prior_remedial_actions_recorded": True,
                },
            ]
        }
    }


class TransitionRequest(BaseModel):
    """Request to move a case to another stage."""
    target_stage: str = Field(..., description="Stage value, e.g., 'notified'")
    reason: str = Field(default="", description="Recorded in the case history")
    at: Optional[datetime] = Field(default=None, description="When the move happened")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"target_stage": "notified"},
                {"target_stage": "rebuttal", "reason": "Notification reissued"},
            ]
        }
    }


class MilestoneCompletionRequest(BaseModel):
    """Completion of a procedural milestone."""
    completed_on: date = Field(..., description="Completion date (YYYY-MM-DD)")


class MilestoneNoteRequest(BaseModel):
    """Audit note on a milestone."""
    note: str = Field(..., min_length=1)
