"""
Convivencia Engine

Pure, deterministic core of the case tracker. Nothing here performs I/O or
reads the wall clock.

Services:
- DeadlineRuleTable: Fatal deadline per severity
- StageStateMachine: Guarded stage transitions (graduality gate)
- UrgencyClassifier: Deadline urgency tiers for dashboards and calendars

Usage:
    from convivencia.engine import (
        StageStateMachine,
        UrgencyClassifier,
        compute_fatal_deadline,
    )
"""
from __future__ import annotations

from .deadline_rules import (
    BUSINESS_DAYS_EXPULSION,
    BUSINESS_DAYS_RECONSIDERATION,
    BUSINESS_DAYS_RELEVANT,
    DEADLINE_RULES,
    HOURS_MINOR,
    DeadlineRule,
    compute_fatal_deadline,
    compute_reconsideration_deadline,
    get_deadline_rule,
)
from .stage_machine import (
    RESOLUTION_STAGE,
    StageStateMachine,
    classify_transition,
)
from .urgency import (
    ALERT_TIERS,
    CRITICAL_WINDOW,
    WARNING_WINDOW,
    UrgencyAssessment,
    UrgencyClassifier,
    classify,
)

__all__ = [
    # Deadlines
    "DeadlineRule",
    "DEADLINE_RULES",
    "HOURS_MINOR",
    "BUSINESS_DAYS_RELEVANT",
    "BUSINESS_DAYS_EXPULSION",
    "BUSINESS_DAYS_RECONSIDERATION",
    "compute_fatal_deadline",
    "compute_reconsideration_deadline",
    "get_deadline_rule",
    # Stages
    "StageStateMachine",
    "RESOLUTION_STAGE",
    "classify_transition",
    # Urgency
    "UrgencyClassifier",
    "UrgencyAssessment",
    "ALERT_TIERS",
    "CRITICAL_WINDOW",
    "WARNING_WINDOW",
    "classify",
]
