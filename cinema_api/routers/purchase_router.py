from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from cinema_api.database import get_db
from cinema_api.crud.purchase_crud import purchase_crud
from cinema_api.model.purchase import PurchaseStatusEnum
from cinema_api.schemas import PurchaseStatus
from cinema_api.schemas.purchase_schema import PaymentDetails, PurchaseConfirm, PurchaseInitiate, PurchaseOut
from cinema_api.services.dependencies import get_purchase_service
from cinema_api.services.purchase_service import PurchaseService
from cinema_api.utils.auth.jwt_bearer import JWTBearer, is_admin

router = APIRouter(prefix="/purchases", tags=["Purchases"])


def _ensure_owner(purchase, payload: dict) -> None:
    if not is_admin(payload) and purchase.user_id != payload.get("sub"):
        raise HTTPException(status_code=403, detail="Not authorized")


@router.get("/", response_model=List[PurchaseOut])
def get_purchases(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 10,
    showtime_id: Optional[int] = Query(None),
    status_: Optional[PurchaseStatus] = Query(None, alias="status"),
    payload: dict = Depends(JWTBearer()),
):
    filters = {}
    if showtime_id is not None:
        filters["showtime_id"] = showtime_id
    if status_ is not None:
        filters["status"] = PurchaseStatusEnum(status_.value)
    if not is_admin(payload):
        filters["user_id"] = payload.get("sub")
    return purchase_crud.get_all(db, skip=skip, limit=limit, filters=filters)


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), payload: dict = Depends(JWTBearer())):
    purchase = purchase_crud.get(db, purchase_id)
    _ensure_owner(purchase, payload)
    return purchase


@router.post("/initiate", response_model=PurchaseOut, status_code=status.HTTP_201_CREATED)
def initiate_purchase(
    obj: PurchaseInitiate,
    service: PurchaseService = Depends(get_purchase_service),
    payload: dict = Depends(JWTBearer()),
):
    """Reserve seats for the seat-selection window."""
    return service.initiate(obj.showtime_id, obj.number_tickets, user_id=payload.get("sub"))


@router.put("/{purchase_id}/create", response_model=PurchaseOut)
def create_purchase(
    purchase_id: int,
    obj: PurchaseConfirm,
    db: Session = Depends(get_db),
    service: PurchaseService = Depends(get_purchase_service),
    payload: dict = Depends(JWTBearer()),
):
    """Confirm the held seats (confirmation screen)."""
    _ensure_owner(purchase_crud.get(db, purchase_id), payload)
    return service.create(purchase_id, obj.chosen_seats)


@router.put("/{purchase_id}/execute", response_model=PurchaseOut)
def execute_purchase(
    purchase_id: int,
    obj: Optional[PaymentDetails] = None,
    db: Session = Depends(get_db),
    service: PurchaseService = Depends(get_purchase_service),
    payload: dict = Depends(JWTBearer()),
):
    """Record payment and generate the ticket QR code."""
    _ensure_owner(purchase_crud.get(db, purchase_id), payload)
    return service.execute(purchase_id, obj)
