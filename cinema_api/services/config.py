from dataclasses import dataclass


@dataclass(frozen=True)
class SchedulingConfig:
    """Scheduling rules shared by the showtime and purchase services.

    Built from the settings table by `setting_crud.load_scheduling_config`.
    """

    min_interval_minutes: int
    seat_selection_window_minutes: int
    max_tickets_per_purchase: int

    def __post_init__(self) -> None:
        if self.min_interval_minutes < 0:
            raise ValueError("min_interval_minutes cannot be negative")
        if self.seat_selection_window_minutes < 0:
            raise ValueError("seat_selection_window_minutes cannot be negative")
        if self.max_tickets_per_purchase < 1:
            raise ValueError("max_tickets_per_purchase must be at least 1")
