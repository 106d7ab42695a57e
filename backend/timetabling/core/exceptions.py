class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class InvalidTimeFormatError(AppError):
    """Raised when a time string is not a valid 24-hour HH:MM value."""
    def __init__(self, value: object):
        super().__init__(
            f"Invalid time format: {value}. Expected HH:MM format.",
            status_code=400,
            details={"value": str(value)},
        )

class InvalidTimeRangeError(AppError):
    """Raised when an entry would end at or before its start."""
    def __init__(self, start_time: str, end_time: str):
        super().__init__(
            "end_time must be after start_time",
            status_code=400,
            details={"start_time": start_time, "end_time": end_time},
        )

class ScheduleConflictError(AppError):
    """Raised when a create or update collides with existing entries."""
    def __init__(self, conflicts: list, message: str = "Schedule conflicts detected"):
        self.conflicts = list(conflicts)
        super().__init__(
            message,
            status_code=409,
            details={"conflicts": [conflict.model_dump() for conflict in self.conflicts]},
        )

class UniqueConstraintViolation(AppError):
    """Raised by an entry store when the class already has an entry starting at that time."""
    def __init__(self, key: tuple):
        self.key = key
        super().__init__(
            "An entry already exists for this class at the requested day and start time",
            status_code=409,
            details={"key": [None if part is None else str(part) for part in key]},
        )

class PreconditionFailedError(AppError):
    """Raised when an entry's lifecycle state does not allow the requested action."""
    def __init__(self, message: str):
        super().__init__(message, status_code=409)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
