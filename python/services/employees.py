"""
Employee directory: the identity store that face registration commits into.

InMemoryEmployeeDirectory is the default; a database-backed directory only
has to provide the same create/get/delete methods.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.exceptions import EmployeeNotFoundError, ValidationError
from core.logging import get_logger
from models.domain.employee import Employee

logger = get_logger(__name__)


class InMemoryEmployeeDirectory:
    """Process-local employee registry."""

    def __init__(self):
        self._employees: Dict[str, Employee] = {}
        self._lock = threading.Lock()

    def create(self, name: str, department: Optional[str] = None, position: Optional[str] = None) -> Employee:
        if not name or not name.strip():
            raise ValidationError("Employee name is required", field="name")

        employee = Employee(
            id=uuid.uuid4().hex,
            name=name.strip(),
            department=department,
            position=position,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._employees[employee.id] = employee
        logger.info(f"[Employees] Created {employee.id} ({employee.name})")
        return employee

    def get(self, employee_id: str) -> Employee:
        with self._lock:
            employee = self._employees.get(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def list(self) -> List[Employee]:
        with self._lock:
            return list(self._employees.values())

    def delete(self, employee_id: str) -> None:
        with self._lock:
            if self._employees.pop(employee_id, None) is None:
                raise EmployeeNotFoundError(employee_id)
        logger.info(f"[Employees] Deleted {employee_id}")
