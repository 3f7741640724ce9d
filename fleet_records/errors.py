# fleet_records/errors.py
"""
Error kinds raised by the records engine.
The API layer maps each kind to an HTTP status in main.py.
"""


class FleetRecordsError(Exception):
    pass


class NotFound(FleetRecordsError):
    """Entity id or vehicle number does not exist."""


class ValidationFailed(FleetRecordsError):
    """Missing/out-of-range field, bad enumeration value, or rejected upload."""

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or [message]


class ConstraintViolation(FleetRecordsError):
    """Uniqueness or foreign-key breach reported by the store."""


class NoFieldsToUpdate(FleetRecordsError):
    def __init__(self, message: str = "No fields to update"):
        super().__init__(message)


class StorageFailure(FleetRecordsError):
    """Underlying file or transactional-store I/O error."""
