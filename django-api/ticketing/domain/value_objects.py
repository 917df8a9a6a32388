"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SaleId:
    """Unique identifier for a Sale."""

    value: UUID

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Interval:
    """Inclusive range of ticket numbers."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Interval start cannot be greater than end")

    def __contains__(self, number: int) -> bool:
        return self.start <= number <= self.end

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    def touches(self, other: "Interval") -> bool:
        """True when the two intervals overlap or sit next to each other."""
        return other.start <= self.end + 1 and other.end >= self.start - 1

    def union(self, other: "Interval") -> "Interval":
        return Interval(min(self.start, other.start), max(self.end, other.end))

    def gap_to(self, other: "Interval") -> int:
        """Smaller of the two possible gaps between the intervals."""
        return min(abs(other.start - self.end - 1), abs(self.start - other.end - 1))


@dataclass(frozen=True)
class Buyer:
    """Contact details of whoever bought a ticket or a bulk block."""

    name: str
    email: str | None = None
    phone: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Buyer name cannot be empty")

    @classmethod
    def from_input(cls, name: str, email: str | None = None, phone: str | None = None) -> Self:
        """Strip whitespace, turning blank optional fields into None."""
        return cls(
            name=(name or "").strip(),
            email=(email or "").strip() or None,
            phone=(phone or "").strip() or None,
        )

    def merged_with(self, newer: "Buyer") -> "Buyer":
        """Name always comes from ``newer``; contact fields only when supplied."""
        return Buyer(
            name=newer.name,
            email=newer.email if newer.email is not None else self.email,
            phone=newer.phone if newer.phone is not None else self.phone,
        )
