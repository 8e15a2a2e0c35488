"""
Employee domain model.
Minimal identity record created by the directory before face registration.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Employee(BaseModel):
    """Identity record. The id is also the person name on the remote recognizer."""

    id: str = Field(..., description="Unique employee ID")
    name: str = Field(..., min_length=1)
    department: Optional[str] = None
    position: Optional[str] = None
    created_at: Optional[datetime] = None
