"""Domain error codes for the checkout module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    CHECKOUT_IN_PROGRESS = "CHECKOUT_IN_PROGRESS"
    INVALID_CHECKOUT_STATE = "INVALID_CHECKOUT_STATE"
    GATEWAY_ERROR = "GATEWAY_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class CheckoutInProgressError(DomainError):
    """Raised when a purchase is submitted while another is outstanding."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CHECKOUT_IN_PROGRESS,
            message="A purchase is already being processed",
        )


class InvalidCheckoutStateError(DomainError):
    """Raised when a checkout transition is not allowed from the current view."""

    def __init__(self, state: str, action: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CHECKOUT_STATE,
            message=f"Cannot {action} while checkout is {state}",
        )
        self.state = state


class GatewayError(DomainError):
    """Raised by stores when the backend call fails.

    ``message`` is the collaborator's own error text and is shown to the
    buyer verbatim.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(code=ErrorCode.GATEWAY_ERROR, message=message)
        self.status_code = status_code
