"""
Face router package.
Combines all sub-routers into a single router for mounting in main.py.

Structure:
- pipeline.py: /register, /recognize, /detect
- database.py: /database/info, /database/save, /database/{name}
"""

from fastapi import APIRouter

from .dependencies import set_services
from . import pipeline
from . import database

router = APIRouter()

router.include_router(pipeline.router)
router.include_router(database.router)

__all__ = [
    'router',
    'set_services',
]
