# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from pipeguard.core.enums import ActionType, FailureCategory, RemediationSeverity
from pipeguard.core.models.pipeline import PipelineRun

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

@dataclass(frozen=True)
class RemediationAction:
    """
    Value object describing one concrete remote operation on a pipeline.

    Every action is proposed, never executed, until a human approves it.
    """
    id: str
    type: ActionType
    pipeline: PipelineRun
    description: str
    requires_confirmation: bool = True
    parameters: dict[str, str] = field(default_factory=dict)

    def get_parameter(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """ Get a parameter value. """
        return self.parameters.get(key, default)

    def to_dict(self) -> dict:
        """ Convert to dictionary """
        return {
            "id": self.id,
            "type": self.type.value,
            "pipeline_id": self.pipeline.id,
            "description": self.description,
            "requires_confirmation": self.requires_confirmation,
            "parameters": dict(self.parameters),
        }

@dataclass(frozen=True)
class RemediationProposal:
    """
    Value object representing a consent-pending bundle of remediation actions.

    Created by the proposal generator and immutable once created.
    """
    pipeline: PipelineRun
    category: FailureCategory
    failure_type: str
    reason: str
    actions: tuple[RemediationAction, ...]
    severity: RemediationSeverity
    confidence: float
    estimated_time: str
    warning: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        object.__setattr__(self, "confidence", max(0.0, min(1.0, self.confidence)))
        object.__setattr__(self, "actions", tuple(self.actions))

    def is_manual_only(self) -> bool:
        """ Check if the proposal carries no automated actions. """
        return len(self.actions) == 0

    def to_dict(self) -> dict:
        """ Convert to dictionary. """
        return {
            "pipeline_id": self.pipeline.id,
            "category": self.category.value,
            "failure_type": self.failure_type,
            "reason": self.reason,
            "actions": [action.to_dict() for action in self.actions],
            "severity": self.severity.value,
            "confidence": self.confidence,
            "estimated_time": self.estimated_time,
            "warning": self.warning,
            "created_at": self.created_at.isoformat(),
        }

@dataclass
class ActionResult:
    """
    Outcome of executing a single remediation action.

    Transient; produced per execution and never persisted.
    """
    success: bool
    message: str
    timestamp: datetime = field(default_factory=_utcnow)
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """ Convert to dictionary """
        return {
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

@dataclass
class RemediationResult:
    """
    Aggregated outcome of a consent decision.

    success is the logical AND of every action result.
    """
    success: bool
    message: str
    actions_taken: list[ActionResult] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str) -> "RemediationResult":
        """ Build a failed result with no actions taken. """
        return cls(success=False, message=message, actions_taken=[])

    def failed_actions(self) -> list[ActionResult]:
        """ Get the action results that did not succeed """
        return [result for result in self.actions_taken if not result.success]

    def to_dict(self) -> dict:
        """ Convert to dictionary. """
        return {
            "success": self.success,
            "message": self.message,
            "actions_taken": [result.to_dict() for result in self.actions_taken],
        }
