"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum

from ticketing.domain.value_objects import Interval


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    OUT_OF_EVENT_RANGE = "OUT_OF_EVENT_RANGE"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    DISCONTINUOUS_RANGE = "DISCONTINUOUS_RANGE"
    EMPTY_INPUT = "EMPTY_INPUT"
    BULK_BUYER_REQUIRED = "BULK_BUYER_REQUIRED"
    BULK_CASHIER_CONFLICT = "BULK_CASHIER_CONFLICT"
    EVENT_AWAITING_INGESTION = "EVENT_AWAITING_INGESTION"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    IN_BULK_RANGE = "IN_BULK_RANGE"
    BULK_TICKET_NOT_INDIVIDUALLY_SELLABLE = "BULK_TICKET_NOT_INDIVIDUALLY_SELLABLE"
    NO_INVENTORY = "NO_INVENTORY"
    ALREADY_SOLD = "ALREADY_SOLD"
    ALREADY_USED = "ALREADY_USED"
    CONCURRENT_SALE_CONFLICT = "CONCURRENT_SALE_CONFLICT"
    TICKET_WRITE_FAILED = "TICKET_WRITE_FAILED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def retryable(self) -> bool:
        return False

    def details(self) -> dict:
        """Structured diagnostics for callers; empty unless a subclass adds some."""
        return {}


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class OutOfBoundsError(DomainError):
    """Raised when a proposed bulk range leaves the event's range."""

    def __init__(self, requested: Interval, bounds: Interval | None) -> None:
        if bounds is None:
            message = f"Bulk range {requested} must start at ticket 1 or later"
        else:
            message = f"Bulk range {requested} is outside event range {bounds}"
        super().__init__(code=ErrorCode.OUT_OF_BOUNDS, message=message)
        self.requested = requested
        self.bounds = bounds

    def details(self) -> dict:
        return {
            "requested": [self.requested.start, self.requested.end],
            "bounds": [self.bounds.start, self.bounds.end] if self.bounds else None,
        }


class InvalidIntervalError(DomainError):
    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INTERVAL,
            message=f"Invalid range: start {start} is greater than end {end}",
        )


class DiscontinuousRangeError(DomainError):
    """Raised when a new bulk range would leave a gap against the existing one."""

    def __init__(self, requested: Interval, existing: Interval, gap_size: int) -> None:
        super().__init__(
            code=ErrorCode.DISCONTINUOUS_RANGE,
            message=(
                f"New bulk range {requested} has a gap with existing range "
                f"{existing}. Gap size: {gap_size}"
            ),
        )
        self.requested = requested
        self.existing = existing
        self.gap_size = gap_size

    def details(self) -> dict:
        return {
            "gap_size": self.gap_size,
            "requested": [self.requested.start, self.requested.end],
            "existing": [self.existing.start, self.existing.end],
        }


class EmptyInputError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.EMPTY_INPUT, message="No valid tickets found in input")


class BulkBuyerRequiredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BULK_BUYER_REQUIRED,
            message="A buyer is required to record bulk sold tickets",
        )


class BulkCashierConflictError(DomainError):
    """Raised when bulk numbers are already taken by cashier sales."""

    def __init__(self, numbers: list[int]) -> None:
        shown = ", ".join(str(n) for n in numbers[:10])
        if len(numbers) > 10:
            shown += ", ..."
        super().__init__(
            code=ErrorCode.BULK_CASHIER_CONFLICT,
            message=f"Tickets already sold by cashier inside bulk range: {shown}",
        )
        self.numbers = numbers

    def details(self) -> dict:
        return {"numbers": list(self.numbers)}


class EventAwaitingIngestionError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_AWAITING_INGESTION,
            message="Event is awaiting ticket upload. Please upload tickets first.",
        )


class OutOfEventRangeError(DomainError):
    def __init__(self, number: int, bounds: Interval) -> None:
        super().__init__(
            code=ErrorCode.OUT_OF_EVENT_RANGE,
            message=f"Ticket must be between {bounds.start} and {bounds.end}",
        )
        self.number = number
        self.bounds = bounds

    def details(self) -> dict:
        return {"number": self.number, "bounds": [self.bounds.start, self.bounds.end]}


class InBulkRangeError(DomainError):
    def __init__(self, number: int, bulk_range: Interval) -> None:
        super().__init__(
            code=ErrorCode.IN_BULK_RANGE,
            message=(
                f"Ticket {number} is in bulk sold range ({bulk_range}) "
                "and cannot be sold individually"
            ),
        )
        self.number = number
        self.bulk_range = bulk_range


class BulkTicketNotIndividuallySellableError(DomainError):
    def __init__(self, number: int) -> None:
        super().__init__(
            code=ErrorCode.BULK_TICKET_NOT_INDIVIDUALLY_SELLABLE,
            message="This is a bulk ticket and cannot be sold individually",
        )
        self.number = number


class InvalidAmountError(DomainError):
    def __init__(self, amount) -> None:
        super().__init__(code=ErrorCode.INVALID_AMOUNT, message=f"Invalid sale amount: {amount}")


class NoInventoryError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NO_INVENTORY, message="No tickets available for sale")


class AlreadySoldError(DomainError):
    def __init__(self, number: int) -> None:
        super().__init__(code=ErrorCode.ALREADY_SOLD, message="Ticket already sold")
        self.number = number


class AlreadyUsedError(DomainError):
    def __init__(self, number: int) -> None:
        super().__init__(code=ErrorCode.ALREADY_USED, message="Ticket already used")
        self.number = number


class ConcurrentSaleConflictError(DomainError):
    def __init__(self, number: int) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENT_SALE_CONFLICT,
            message=f"Ticket {number} was sold by another cashier, refresh and try again",
        )
        self.number = number


class TicketWriteError(DomainError):
    """Raised by stores when a ticket write violates a uniqueness rule."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.TICKET_WRITE_FAILED, message=message)


class StoreUnavailableError(DomainError):
    """Raised when the backing store timed out or dropped the connection."""

    def __init__(self, message: str = "Ticket store is unavailable, try again") -> None:
        super().__init__(code=ErrorCode.STORE_UNAVAILABLE, message=message)

    @property
    def retryable(self) -> bool:
        return True
