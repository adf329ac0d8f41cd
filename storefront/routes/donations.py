# storefront/routes/donations.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.donation import (
    DonationRequestCreate, DonationRequestOut, DonationStatusPatch,
    DonationAcceptPayload, DonationFulfillmentOut, FulfillmentStatusPatch,
    ProductDonationCreate, NewProductDonationCreate, ProductDonationOut,
)
from storefront.services import donations as donation_service
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import get_current_user, get_optional_user, role_required

router = APIRouter(prefix="/donations", tags=["Donations"])


# Public: organisations can ask for donations without an account
@router.post("/requests", response_model=DonationRequestOut, status_code=status.HTTP_201_CREATED)
def submit_request(
    payload: DonationRequestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_optional_user),
):
    user_id = current_user.id if current_user else None
    donation = donation_service.submit_donation_request(db, payload.model_dump(), user_id=user_id)
    write_log(db, user_id=user_id, action="DONATION_REQUEST", resource="donations",
              ip=client_ip(request), meta={"request_id": donation.id})
    return donation


@router.get("/requests", response_model=List[DonationRequestOut])
def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    urgency: Optional[str] = Query(None, description="Only approved requests are listed by urgency"),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return donation_service.list_donation_requests(db, status=status_filter, urgency=urgency)


@router.get("/requests/{request_id}", response_model=DonationRequestOut)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    donation = donation_service.get_donation_request(db, request_id)
    if not donation:
        raise HTTPException(status_code=404, detail="Donation request not found")
    return donation


@router.patch("/requests/{request_id}/status", response_model=DonationRequestOut)
def update_request_status(
    request_id: int,
    payload: DonationStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("admin")),
):
    donation = donation_service.update_donation_request_status(db, request_id, payload.status)
    write_log(db, user_id=current_user.id, action="DONATION_STATUS_CHANGE", resource="donations",
              ip=client_ip(request), meta={"request_id": request_id, "new": payload.status})
    return donation


@router.post("/requests/{request_id}/accept", response_model=DonationFulfillmentOut, status_code=status.HTTP_201_CREATED)
def accept_request(
    request_id: int,
    payload: DonationAcceptPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    fulfillment = donation_service.accept_donation_request(
        db, request_id, current_user.id, payload.products, notes=payload.notes
    )
    write_log(db, user_id=current_user.id, action="DONATION_ACCEPT", resource="donations",
              ip=client_ip(request), meta={"request_id": request_id, "fulfillment_id": fulfillment.id})
    return fulfillment


# Sellers see their own fulfilments, admins see all
@router.get("/fulfillments", response_model=List[DonationFulfillmentOut])
def list_fulfillments(
    request_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller", "admin")),
):
    seller_id = None if current_user.role == "admin" else current_user.id
    return donation_service.list_fulfillments(db, seller_id=seller_id, request_id=request_id)


@router.patch("/fulfillments/{fulfillment_id}/status", response_model=DonationFulfillmentOut)
def update_fulfillment_status(
    fulfillment_id: int,
    payload: FulfillmentStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    fulfillment = donation_service.update_fulfillment_status(db, current_user.id, fulfillment_id, payload.status)
    write_log(db, user_id=current_user.id, action="FULFILLMENT_STATUS_CHANGE", resource="donations",
              ip=client_ip(request), meta={"fulfillment_id": fulfillment_id, "new": payload.status})
    return fulfillment


# =========================
# DIRECT DONATIONS
# =========================
@router.post("/products", response_model=ProductDonationOut, status_code=status.HTTP_201_CREATED)
def donate_product(
    payload: ProductDonationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    donation = donation_service.donate_product(
        db, current_user.id, payload.product_id, payload.quantity, payload.destination,
        notes=payload.notes, value=payload.value,
    )
    write_log(db, user_id=current_user.id, action="PRODUCT_DONATE", resource="donations",
              ip=client_ip(request), meta={"donation_id": donation.id, "product_id": payload.product_id})
    return donation


@router.post("/products/new", response_model=ProductDonationOut, status_code=status.HTTP_201_CREATED)
def donate_new_product(
    payload: NewProductDonationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    donation = donation_service.donate_new_product(
        db, current_user.id, payload.product.model_dump(), payload.quantity, payload.destination,
        notes=payload.notes,
    )
    write_log(db, user_id=current_user.id, action="PRODUCT_DONATE", resource="donations",
              ip=client_ip(request), meta={"donation_id": donation.id, "product_id": donation.product_id})
    return donation


@router.get("/products", response_model=List[ProductDonationOut])
def list_product_donations(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    return donation_service.list_product_donations(db, current_user.id)
