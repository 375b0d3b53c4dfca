from datetime import datetime
from typing import Optional, Set

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from cinema_api.crud.base import CRUDBase
from cinema_api.model.purchase import Purchase, PurchaseSeat, PurchaseStatusEnum
from cinema_api.schemas.purchase_schema import PurchaseConfirm, PurchaseInitiate


class CRUDPurchase(CRUDBase[Purchase, PurchaseInitiate, PurchaseConfirm]):
    def taken_seats(self, db: Session, showtime_id: int, now: datetime) -> Set[str]:
        """Seat labels held by live purchases of a showtime.

        A purchase is live when it is created or executed, or initiated with
        its seat-selection window still open.
        """
        rows = (
            db.query(PurchaseSeat.seat_label)
            .join(Purchase, Purchase.purchase_id == PurchaseSeat.purchase_id)
            .filter(PurchaseSeat.showtime_id == showtime_id)
            .filter(
                or_(
                    Purchase.status != PurchaseStatusEnum.INITIATED,
                    Purchase.expired_seat_selection_at >= now,
                )
            )
            .all()
        )
        return {label for (label,) in rows}

    def release_expired_holds(self, db: Session, now: datetime, showtime_id: Optional[int] = None) -> int:
        """Delete seat rows of lapsed initiated purchases so their seats can be sold again.

        The purchase rows keep their chosen_seats for history. Caller commits.
        """
        expired_ids = select(Purchase.purchase_id).where(
            Purchase.status == PurchaseStatusEnum.INITIATED,
            Purchase.expired_seat_selection_at < now,
        )
        if showtime_id is not None:
            expired_ids = expired_ids.where(Purchase.showtime_id == showtime_id)

        return (
            db.query(PurchaseSeat)
            .filter(PurchaseSeat.purchase_id.in_(expired_ids))
            .delete(synchronize_session="fetch")
        )


purchase_crud = CRUDPurchase(Purchase, id_field="purchase_id")
