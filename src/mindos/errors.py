"""Domain errors raised by the progression core.

Each error carries the HTTP status the API layer maps it to and a stable
machine-readable ``code``. Caller errors (not found, invalid input,
terminal-state violations) are never retried.
"""

from __future__ import annotations


class MindOSError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class NotFound(MindOSError):
    """Referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404
    code = "not_found"


class InvalidInput(MindOSError):
    """Malformed amount, rating, date or other request data."""

    status_code = 400
    code = "invalid_input"


class InvalidAmount(InvalidInput):
    """XP amount is not a finite integer or would drive the total negative."""

    code = "invalid_amount"


class AlreadyCompleted(MindOSError):
    """Mission is already done; done is terminal."""

    status_code = 409
    code = "already_completed"


class MissionLocked(MindOSError):
    """Mission is locked and cannot be completed."""

    status_code = 409
    code = "mission_locked"


class NotClaimable(MindOSError):
    """Referral is not in a state that allows claiming or transitioning."""

    status_code = 409
    code = "not_claimable"


class AlreadyClaimed(NotClaimable):
    """Referral reward was already paid out."""

    code = "already_claimed"


class NoEligibleTemplate(MindOSError):
    """No mission template matches the requested path (configuration error)."""

    status_code = 500
    code = "no_eligible_template"


class ExternalServiceUnavailable(MindOSError):
    """Datastore, text generation or notification collaborator failed."""

    status_code = 503
    code = "external_service_unavailable"
