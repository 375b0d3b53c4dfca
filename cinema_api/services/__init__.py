from cinema_api.services.config import SchedulingConfig
from cinema_api.services.purchase_service import PurchaseService, apply_discount
from cinema_api.services.schedule_validator import ScheduleValidator
from cinema_api.services.seat_allocator import SeatGrid, allocate
from cinema_api.services.showtime_service import ShowtimeService

__all__ = [
    "SchedulingConfig",
    "ScheduleValidator",
    "SeatGrid",
    "allocate",
    "ShowtimeService",
    "PurchaseService",
    "apply_discount",
]
