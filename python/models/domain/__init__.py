"""
Domain models - core business entities.

These are the source of truth for data structures.
All other layers (responses, services, routers) derive from these.
"""

from models.domain.face import (
    BoundingBox,
    DetectionResult,
    FaceAngle,
    RecognitionModel,
    validate_angle_set,
)
from models.domain.registration import (
    RegistrationRequest,
    RegistrationOutcome,
    RecognitionResult,
    RegistrationPhase,
    RegistrationRun,
)
from models.domain.employee import Employee

__all__ = [
    'BoundingBox',
    'DetectionResult',
    'FaceAngle',
    'RecognitionModel',
    'validate_angle_set',
    'RegistrationRequest',
    'RegistrationOutcome',
    'RecognitionResult',
    'RegistrationPhase',
    'RegistrationRun',
    'Employee',
]
