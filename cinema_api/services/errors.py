"""Domain error codes for scheduling and seat allocation.

Routers never build HTTP errors from these; `main.py` maps every
`DomainError` to a client error response.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    SCHEDULING_CONFLICT = "SCHEDULING_CONFLICT"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    SEATS_UNAVAILABLE = "SEATS_UNAVAILABLE"
    TICKET_LIMIT_EXCEEDED = "TICKET_LIMIT_EXCEEDED"
    INVALID_STATE = "INVALID_STATE"
    SEAT_SELECTION_EXPIRED = "SEAT_SELECTION_EXPIRED"
    INVALID_SEAT_SELECTION = "INVALID_SEAT_SELECTION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class SchedulingConflictError(DomainError):
    """Raised when a showtime overlaps another one of the same hall."""

    def __init__(self, hall_id: int) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULING_CONFLICT,
            message="There is no available time for this showtime",
        )
        object.__setattr__(self, "hall_id", hall_id)


class InsufficientCapacityError(DomainError):
    """Raised by the allocator when the grid cannot fit the request."""

    def __init__(self, requested: int, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_CAPACITY,
            message=f"Only {max(remaining, 0)} seat(s) left, {requested} requested",
        )
        object.__setattr__(self, "requested", requested)
        object.__setattr__(self, "remaining", remaining)


class SeatsUnavailableError(DomainError):
    """Raised when a purchase cannot be given the requested number of seats."""

    def __init__(self, showtime_id: int, requested: int, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.SEATS_UNAVAILABLE,
            message=f"Not enough seats available for this showtime ({max(remaining, 0)} left)",
        )
        object.__setattr__(self, "showtime_id", showtime_id)
        object.__setattr__(self, "requested", requested)
        object.__setattr__(self, "remaining", remaining)


class TicketLimitError(DomainError):
    """Raised when the ticket count is outside the allowed range."""

    def __init__(self, maximum: int) -> None:
        super().__init__(
            code=ErrorCode.TICKET_LIMIT_EXCEEDED,
            message=f"Number of tickets must be between 1 and {maximum}",
        )
        object.__setattr__(self, "maximum", maximum)


class InvalidStateError(DomainError):
    """Raised when a purchase is not in the state an operation requires."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_STATE) -> None:
        super().__init__(code=code, message=message)


class SeatSelectionExpiredError(InvalidStateError):
    """Raised when the seat hold of an initiated purchase has lapsed."""

    def __init__(self) -> None:
        super().__init__(
            "Seats selection period had been already expired",
            code=ErrorCode.SEAT_SELECTION_EXPIRED,
        )


class InvalidSeatSelectionError(DomainError):
    """Raised when confirmed seats do not match what the purchase holds."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_SEAT_SELECTION, message=message)
