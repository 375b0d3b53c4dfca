"""Seat geometry and first-available seat allocation."""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Iterator, Self

from cinema_api.services.errors import InsufficientCapacityError


@dataclass(frozen=True)
class SeatGrid:
    """Immutable snapshot of a hall's seat layout.

    A seat label is a row label followed by a column label ("A" + "1" -> "A1").
    """

    rows: tuple[str, ...]
    columns: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError("Seat grid needs at least one row")
        if not self.columns:
            raise ValueError("Seat grid needs at least one column")

    @classmethod
    def from_hall(cls, hall) -> Self:
        return cls(
            rows=tuple(str(r) for r in hall.seat_rows),
            columns=tuple(str(c) for c in hall.seat_columns),
        )

    @property
    def capacity(self) -> int:
        return len(self.rows) * len(self.columns)

    def labels(self) -> Iterator[str]:
        """Yield every seat label in reading order (row by row)."""
        for row in self.rows:
            for column in self.columns:
                yield f"{row}{column}"

    @cached_property
    def label_set(self) -> frozenset[str]:
        return frozenset(self.labels())

    def __contains__(self, label: object) -> bool:
        return label in self.label_set


def allocate(grid: SeatGrid, number_tickets: int, seats_already_taken: Iterable[str]) -> list[str]:
    """Pick `number_tickets` free seats, scanning the grid in reading order.

    Raises:
        ValueError: If number_tickets is less than one.
        InsufficientCapacityError: If the free seats cannot cover the request.
            Nothing is allocated in that case.
    """
    if number_tickets < 1:
        raise ValueError("number_tickets must be at least 1")

    taken = set(seats_already_taken)
    remaining = grid.capacity - len(taken)
    if remaining < 0:
        raise InsufficientCapacityError(number_tickets, remaining)

    chosen: list[str] = []
    for label in grid.labels():
        if label in taken:
            continue
        chosen.append(label)
        if len(chosen) == number_tickets:
            return chosen

    raise InsufficientCapacityError(number_tickets, len(chosen))
