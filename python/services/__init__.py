"""
Services package.

Main modules:
- face_pipeline.py - FacePipelineService facade

Pipeline stages:
- image_codec.py - Decode uploads / encode JPEG
- face_detector.py - Haar cascade detection, degraded mode
- face_cropper.py - Margin crop
- registration.py - Five-angle registration state machine
- recognition.py - Single-probe recognition
- face_api_client.py - Remote face recognition service client
- face_database.py - Remote database administration

Other:
- employees.py - Employee directory (registration commit target)
- auth.py - Bearer token verification and role checks
"""

from services.face_pipeline import FacePipelineService

__all__ = [
    'FacePipelineService',
]
