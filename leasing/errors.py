"""Application error hierarchy and response helpers."""

from typing import Any, Dict

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ProvisioningValidationError(AppError):
    """Provisioning request is missing required selections or fields.

    ``codes`` lists every problem found, so a form can flag all of them at once.
    """

    def __init__(self, codes: list[str]):
        self.codes = list(codes)
        super().__init__(
            "Provisioning request is incomplete: " + ", ".join(self.codes),
            "provisioning_invalid",
            status.HTTP_400_BAD_REQUEST,
        )


class EntityNotFoundError(AppError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found", "not_found", status.HTTP_404_NOT_FOUND)


class InvalidTransitionError(AppError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(
            f"Cannot {action} a payment in status '{current}'",
            "invalid_transition",
            status.HTTP_409_CONFLICT,
        )


class StaleRecordError(AppError):
    """Record changed since the caller last read it."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Record version is {actual}, expected {expected}",
            "stale_record",
            status.HTTP_409_CONFLICT,
        )


class StoreError(AppError):
    """The entity store rejected a request."""

    def __init__(self, message: str, http_status: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(message, "store_error", http_status)


class ProvisioningError(AppError):
    """A dependent provisioning step failed and the workflow stopped.

    ``completed_steps`` lists the steps that already ran; nothing is rolled back.
    """

    def __init__(self, step: Any, completed_steps: list[Any], cause: Exception):
        self.step = step
        self.completed_steps = list(completed_steps)
        self.cause = cause
        super().__init__(
            f"Provisioning failed at step '{getattr(step, 'value', step)}': {cause}",
            "provisioning_failed",
            status.HTTP_502_BAD_GATEWAY,
        )


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    body: Dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }
    if isinstance(error, ProvisioningValidationError):
        body["fields"] = error.codes
    return {"error": body}
