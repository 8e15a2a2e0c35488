"""
Models package - data structures for the application.

Subpackages:
- domain/ - Domain models (core business entities)
- responses/ - Response DTOs (API output)
"""

# Re-export commonly used models
from models.domain.face import BoundingBox, FaceAngle, RecognitionModel
from models.domain.registration import RegistrationOutcome, RecognitionResult
from models.domain.employee import Employee

__all__ = [
    # Face
    'BoundingBox',
    'FaceAngle',
    'RecognitionModel',
    # Registration / recognition
    'RegistrationOutcome',
    'RecognitionResult',
    # Employee
    'Employee',
]
