"""Case endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ...models import Case
from ...service import CaseService
from ..schemas.requests import (
    MilestoneCompletionRequest,
    MilestoneNoteRequest,
    OpenCaseRequest,
    TransitionRequest,
)
from ..schemas.responses import CaseResponse, UrgencyResponse

router = APIRouter(prefix="/cases", tags=["Cases"])


def get_service(request: Request) -> CaseService:
    """The CaseService installed on the app by create_app."""
    return request.app.state.service


def to_response(case: Case) -> CaseResponse:
    return CaseResponse.model_validate(case.to_dict())


@router.post("", response_model=CaseResponse, status_code=201)
async def open_case(body: OpenCaseRequest, service: CaseService = Depends(get_service)):
    """
    Open a case.

    The fatal deadline is fixed from the severity: 24 hours for minor,
    45 business days for relevant, 10 business days for expulsion.
    """
    case = service.open_case(
        subject_name=body.subject_name,
        severity=body.severity,
        opened_at=body.opened_at,
        prior_remedial_actions_recorded=body.prior_remedial_actions_recorded,
        case_id=body.case_id,
    )
    return to_response(case)


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(case_id: str, service: CaseService = Depends(get_service)):
    """Get full case state, including milestones and stage history."""
    return to_response(service.get_case(case_id))


@router.post("/{case_id}/transitions", response_model=CaseResponse)
async def transition_stage(
    case_id: str,
    body: TransitionRequest,
    service: CaseService = Depends(get_service),
):
    """
    Move a case to another stage.

    Moving an expulsion case to resolution requires prior remedial actions
    on file; otherwise the request fails with CV_GRADUALITY_GATE_BLOCKED.
    """
    case = service.transition_stage(
        case_id, body.target_stage, reason=body.reason, at=body.at,
    )
    return to_response(case)


@router.get("/{case_id}/transitions")
async def allowed_transitions(case_id: str, service: CaseService = Depends(get_service)):
    """Stages the case may move to right now."""
    return {
        "case_id": case_id,
        "allowed_targets": [s.value for s in service.allowed_targets(case_id)],
    }


@router.post("/{case_id}/milestones/{milestone_id}/complete", response_model=CaseResponse)
async def complete_milestone(
    case_id: str,
    milestone_id: str,
    body: MilestoneCompletionRequest,
    service: CaseService = Depends(get_service),
):
    """Mark a milestone completed."""
    case = service.record_milestone(case_id, milestone_id, body.completed_on)
    return to_response(case)


@router.post("/{case_id}/milestones/{milestone_id}/notes", response_model=CaseResponse)
async def annotate_milestone(
    case_id: str,
    milestone_id: str,
    body: MilestoneNoteRequest,
    service: CaseService = Depends(get_service),
):
    case = service.annotate_milestone(case_id, milestone_id, body.note)
    return to_response(case)


@router.get("/{case_id}/urgency", response_model=UrgencyResponse)
async def case_urgency(
    case_id: str,
    now: Optional[datetime] = None,
    service: CaseService = Depends(get_service),
):
    """
    Urgency tier of a case. Closed cases report no tier.

    The response also lists milestones past their due date.
    """
    assessment = service.assess_urgency(case_id, now or datetime.now())
    if assessment is None:
        case = service.get_case(case_id)
        return UrgencyResponse(
            case_id=case.id,
            fatal_deadline=case.fatal_deadline.isoformat(),
        )
    return UrgencyResponse(**assessment.to_dict())
