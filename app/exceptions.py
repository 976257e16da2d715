from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, operation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Service error"
    default_code = "SERVICE_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when a proposed allocation set breaks an allocation rule.

    Never raised after storage has been touched; fixable by correcting the input.
    """

    http_status = 400
    default_message = "Invalid input"
    default_code = "VALIDATION_ERROR"


class NotFoundError(ServiceError):
    """Raised when a menu item, school or menu plan does not exist."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Raised when a write conflicts with stored state.

    Covers store constraint violations that slipped past validation (e.g. a race
    with a concurrent delete), writes against an approved menu plan, and deleting
    a school that allocations still reference.
    """

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class StorageError(ServiceError):
    """Raised for any other database or transaction failure.

    details carries the failed operation and entity.
    """

    http_status = 500
    default_message = "Storage failure"
    default_code = "STORAGE_ERROR"

    def __init__(self, message: Optional[str] = None, operation: Optional[str] = None, entity: Optional[str] = None, details: Optional[Mapping[str, Any]] = None):
        ctx: dict[str, Any] = dict(details or {})
        if operation:
            ctx["operation"] = operation
        if entity:
            ctx["entity"] = entity
        super().__init__(message, details=ctx or None)
        self.operation = operation
        self.entity = entity
