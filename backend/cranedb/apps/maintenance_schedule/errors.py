from __future__ import annotations

from typing import Optional


class MaintenanceScheduleError(Exception):
    """Base class for maintenance scheduling errors."""


class InvalidDepartmentError(MaintenanceScheduleError, ValueError):
    """Raised when a department code has no calendar window."""

    def __init__(self, department: object) -> None:
        super().__init__(f"Invalid department: {department}")
        self.department = department


class InvalidStatusError(MaintenanceScheduleError, ValueError):
    """Raised when an override uses a status outside the tracking enum."""

    def __init__(self, status: object) -> None:
        super().__init__(f"Invalid status: {status}")
        self.status = status


class MachineNotFoundError(MaintenanceScheduleError):
    """Raised when a crane does not exist or is inactive."""

    def __init__(self, crane_id: int) -> None:
        super().__init__(f"Crane with ID {crane_id} not found")
        self.crane_id = crane_id


class RecordNotFoundError(MaintenanceScheduleError):
    """Raised when a tracking record was never initialized for a crane/month."""

    def __init__(self, crane_id: int, year: int, month: int) -> None:
        super().__init__(
            f"No tracking record for crane {crane_id} in {year}-{month:02d}"
        )
        self.crane_id = crane_id
        self.year = year
        self.month = month


class ConstraintViolationError(MaintenanceScheduleError):
    """
    A uniqueness / integrity conflict surfaced from the store.

    Normally absorbed by conditional inserts; when it does reach a caller the
    condition is transient and the call can be retried.
    """

    retryable = True

    def __init__(self, operation: str, detail: Optional[str] = None) -> None:
        message = f"Constraint violation during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation
