# storefront/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.order import OrderResponse, OrderCreatePayload, OrderStatusPatch, OrderHistoryOut
from storefront.schemas.tracking import LogisticsTrackingOut
from storefront.services import orders as order_service
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import get_current_user, role_required

router = APIRouter(tags=["Orders"])

# Place an order from the current cart
@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    order = order_service.place_order(db, current_user.id, payload.address_id, payload.payment_method)
    out = order_service.order_to_out(order)
    write_log(
        db, user_id=current_user.id, action="ORDER_PLACE", resource="orders", ip=client_ip(request),
        meta={"order_id": out.id, "total": str(out.total), "items": len(out.items)},
    )
    return out


# List the caller's orders, newest first
@router.get("/orders", response_model=List[OrderResponse])
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return [order_service.order_to_out(o) for o in order_service.get_user_orders(db, current_user.id)]


# Orders containing the seller's products, restricted to the seller's lines
@router.get("/seller/orders", response_model=List[OrderResponse])
def list_seller_orders(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller"))
):
    orders = order_service.get_seller_orders(db, current_user.id)
    return [order_service.order_to_out(o, seller_id=current_user.id) for o in orders]


# Get details of a specific order
@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    order = order_service.get_order_by_id(db, current_user.id, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    seller_view = current_user.role == "seller" and order.user_id != current_user.id
    return order_service.order_to_out(order, seller_id=current_user.id if seller_view else None)


@router.get("/orders/{order_id}/history", response_model=List[OrderHistoryOut])
def get_order_history(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    history = order_service.get_order_history(db, current_user.id, order_id)
    if history is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return history


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    order = order_service.cancel_order(db, current_user.id, order_id)
    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders",
              ip=client_ip(request), meta={"order_id": order_id})
    return order_service.order_to_out(order)


# Advance an order (sellers, logistics, admin)
@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller", "logistics", "admin"))
):
    order = order_service.update_order_status(db, current_user.id, order_id, payload.status, payload.notes)
    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders",
              ip=client_ip(request), meta={"order_id": order_id, "new": payload.status})
    return order_service.order_to_out(order)


# Shipment tracking, opened once the order is ready for pickup
@router.get("/orders/{order_id}/logistics", response_model=LogisticsTrackingOut)
def get_order_logistics(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    tracking = order_service.get_order_logistics(db, current_user.id, order_id)
    if tracking is None:
        raise HTTPException(status_code=404, detail="No logistics for this order")
    return tracking
