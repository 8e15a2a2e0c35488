"""
Registration and recognition domain models.

RegistrationRun is the short-lived state machine behind a single
registration request:

    VALIDATING -> COMMITTING -> SUBMITTING -> DONE
         \\            \\            \\
          +------------+------------+--> FAILED

A run that fails in SUBMITTING keeps committed=True: the identity record
created in COMMITTING is not rolled back.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from core.exceptions import AppException


class RegistrationRequest(BaseModel):
    """Person identifier plus one raw image per angle."""

    person_name: str
    model: Optional[str] = None
    min_quality: Optional[int] = None
    images: Dict[str, Optional[bytes]] = Field(default_factory=dict)


class RegistrationOutcome(BaseModel):
    """Report of the remote recognizer, passed through verbatim."""

    model_config = ConfigDict(protected_namespaces=(), extra="allow")

    success: bool = False
    name: Optional[str] = None
    model_used: Optional[str] = None
    message: Optional[str] = None
    total_registered: Optional[int] = None
    failed_count: Optional[int] = None
    qualities: Optional[List[Any]] = None


class RecognitionResult(BaseModel):
    """Remote identification result with name/confidence lifted out of the payload."""

    recognized_name: Optional[str] = None
    confidence: Optional[float] = None
    matches: List[Any] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)


class RegistrationPhase(str, Enum):
    VALIDATING = "validating"
    COMMITTING = "committing"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS = {
    RegistrationPhase.VALIDATING: {RegistrationPhase.COMMITTING, RegistrationPhase.FAILED},
    RegistrationPhase.COMMITTING: {RegistrationPhase.SUBMITTING, RegistrationPhase.FAILED},
    RegistrationPhase.SUBMITTING: {RegistrationPhase.DONE, RegistrationPhase.FAILED},
    RegistrationPhase.DONE: set(),
    RegistrationPhase.FAILED: set(),
}


class RegistrationRun:
    """Mutable per-request state. Not shared between requests."""

    def __init__(self, person_name: str):
        self.person_name = person_name
        self.phase = RegistrationPhase.VALIDATING
        self.history: List[RegistrationPhase] = [RegistrationPhase.VALIDATING]
        self.committed = False
        self.person_id: Optional[str] = None
        self.model: Optional[str] = None
        self.outcome: Optional[RegistrationOutcome] = None
        self.error: Optional[AppException] = None
        self.failed_phase: Optional[RegistrationPhase] = None

    @property
    def succeeded(self) -> bool:
        return self.phase == RegistrationPhase.DONE

    @property
    def finished(self) -> bool:
        return self.phase in (RegistrationPhase.DONE, RegistrationPhase.FAILED)

    def advance(self, phase: RegistrationPhase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise RuntimeError(f"Illegal registration transition {self.phase.value} -> {phase.value}")
        self.phase = phase
        self.history.append(phase)

    def mark_committed(self, person_id: str) -> None:
        self.committed = True
        self.person_id = person_id

    def fail(self, error: AppException) -> None:
        self.failed_phase = self.phase
        self.error = error
        self.advance(RegistrationPhase.FAILED)

    def complete(self, outcome: RegistrationOutcome) -> None:
        self.outcome = outcome
        self.advance(RegistrationPhase.DONE)

    def __repr__(self) -> str:
        return (
            f"RegistrationRun(person={self.person_name!r}, phase={self.phase.value}, "
            f"committed={self.committed})"
        )
