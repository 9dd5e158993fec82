# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional, Any

class PipeGuardException(Exception):
    """
    Base exception for all PipeGuard errors.

    All custom exceptions should inherit from this.
    """
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for structured results."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

class ActionExecutionError(PipeGuardException):
    """
    Raised when an action cannot be carried out.

    Raised by CallbackRemediator for malformed callback results; integrator
    callbacks may raise it for failed provider operations.
    """
    def __init__(self, action_id: str, action_type: str, reason: str):
        super().__init__(
            message=f"Action {action_id} ({action_type}) failed: {reason}",
            error_code="action_execution_failed",
            details={
                "action_id": action_id,
                "action_type": action_type,
                "reason": reason,
            },
        )

class InvalidActionParametersError(PipeGuardException):
    """Raised when an action lacks parameters its remediator requires."""
    def __init__(self, action_id: str, missing: list[str]):
        super().__init__(
            message=f"Action {action_id} is missing required parameters: {', '.join(missing)}",
            error_code="invalid_action_parameters",
            details={"action_id": action_id, "missing": missing},
        )

class RemediatorNotRegisteredError(PipeGuardException):
    """Raised when no remediator handles an action type."""
    def __init__(self, action_type: str):
        super().__init__(
            message=f"No remediator registered for action type: {action_type}",
            error_code="remediator_not_registered",
            details={"action_type": action_type},
        )

class NarrativeGenerationError(PipeGuardException):
    """Raised when narrative text generation fails."""
    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(
            message=f"Narrative generation failed: {reason}",
            error_code="narrative_generation_failed",
            details={"reason": reason, "status_code": status_code},
        )
        self.status_code = status_code

class JobQueueNotRunningError(PipeGuardException):
    """Raised when submitting to a job queue that is not running."""
    def __init__(self, queue_name: str):
        super().__init__(
            message=f"Job queue '{queue_name}' is not running",
            error_code="job_queue_not_running",
            details={"queue": queue_name},
        )
