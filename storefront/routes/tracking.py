# storefront/routes/tracking.py
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.tracking import ProductEventOut, TrackingSummary
from storefront.services import tracking as tracking_service
from storefront.utils.tokenJWT import get_current_user, role_required

router = APIRouter(tags=["Tracking"])


# Activity on the seller's products, newest first
@router.get("/seller/tracking", response_model=List[ProductEventOut])
def list_seller_events(
    event_type: Optional[Literal["view", "cart", "purchase", "donation"]] = Query(None),
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    return tracking_service.list_seller_events(db, current_user.id, event_type=event_type)


@router.get("/seller/tracking/summary", response_model=TrackingSummary)
def get_tracking_summary(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    return tracking_service.seller_tracking_summary(db, current_user.id)


@router.get("/seller/tracking/products/{product_id}", response_model=List[ProductEventOut])
def list_product_events(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    return tracking_service.list_product_events(db, current_user.id, product_id)


# The caller's own views, cart adds and purchases
@router.get("/tracking/me", response_model=List[ProductEventOut])
def list_my_events(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return tracking_service.list_buyer_events(db, current_user.id)
