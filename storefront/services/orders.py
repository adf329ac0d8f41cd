# storefront/services/orders.py
"""Checkout and order lifecycle.

Orders are snapshots: the total and every line's name, image and price are
copied from the catalog when the order is placed. Status changes go through
``ORDER_WORKFLOW`` and are written with a compare-and-set on the status that
was read, so a concurrent change makes the later writer fail instead of
silently overwriting it.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from storefront.config import settings
from storefront.errors import (
    StorefrontError, NotAuthenticated, NotFound, InvalidRequest,
    InvalidTransition, PermissionDenied,
)
from storefront.models.address import Address
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem, OrderHistory
from storefront.models.tracking import LogisticsTracking
from storefront.models.users import Profile
from storefront.schemas.order import OrderResponse, OrderItemOut
from storefront.services.cart import get_open_cart, empty_cart, CENT
from storefront.services.catalog import decrement_stock, restock
from storefront.services.tracking import record_event, sync_logistics, get_logistics
from storefront.utils.transactions import rollback_and_raise
from storefront.workflow import ORDER_WORKFLOW

logger = logging.getLogger(__name__)

orders_table = Order.__table__

# Roles that may see every order
STAFF_ROLES = {"admin", "logistics"}

# Targets each role may move an order to (further restricted by ORDER_WORKFLOW)
ROLE_TARGETS = {
    "seller": {"processing", "ready_for_pickup", "dispatched"},
    "logistics": {"dispatched", "delivered"},
    "admin": {"processing", "ready_for_pickup", "dispatched", "delivered", "cancelled"},
}


def order_to_out(order: Order, seller_id: Optional[str] = None) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        # Sellers only see their own lines of a shared order
        if seller_id is not None and it.seller_id != seller_id:
            continue
        price = Decimal(it.price)
        items.append(OrderItemOut(
            id=it.id,
            product_id=it.product_id,
            seller_id=it.seller_id,
            product_name=it.product_name,
            image=it.image,
            quantity=it.quantity,
            price=price,
            line_total=(price * it.quantity).quantize(CENT),
        ))
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        address_id=order.address_id,
        status=order.status,
        total=Decimal(order.total).quantize(CENT),
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


def _with_items(db: Session):
    return db.query(Order).options(joinedload(Order.items))


def _profile(db: Session, user_id: str) -> Profile:
    if not user_id:
        raise NotAuthenticated("User not authenticated")
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise NotAuthenticated("Unknown user")
    return profile


def _is_visible(order: Order, profile: Profile) -> bool:
    if order.user_id == profile.id or profile.role in STAFF_ROLES:
        return True
    if profile.role == "seller":
        return any(it.seller_id == profile.id for it in order.items)
    return False


def place_order(db: Session, user_id: str, address_id: int, payment_method: Optional[str] = None) -> Order:
    """Turn the user's cart into an order.

    Creating the order and its lines, taking the stock and emptying the cart
    happen in one transaction; if any line cannot be served nothing is kept.
    """
    if not user_id:
        raise NotAuthenticated("User not authenticated")

    address = db.query(Address).filter(Address.id == address_id, Address.user_id == user_id).first()
    if not address:
        raise NotFound("Address not found")

    cart = get_open_cart(db, user_id)
    lines = (
        db.query(CartItem)
        .options(joinedload(CartItem.product))
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
        .all()
    )
    if not lines:
        raise InvalidRequest("Cart is empty")

    try:
        total = sum((Decimal(line.product.price) * line.quantity for line in lines), Decimal("0"))
        order = Order(
            user_id=user_id,
            address_id=address.id,
            status=ORDER_WORKFLOW.initial,
            total=total.quantize(CENT),
            payment_method=payment_method or settings.DEFAULT_PAYMENT_METHOD,
            payment_status="pending",
        )
        for line in lines:
            product = line.product
            order.items.append(OrderItem(
                product_id=product.id,
                seller_id=product.seller_id,
                product_name=product.name,
                image=product.image,
                quantity=line.quantity,
                price=product.price,
            ))
        order.history.append(OrderHistory(status=order.status, notes="Order placed", created_by=user_id))
        db.add(order)

        for line in lines:
            decrement_stock(db, line.product_id, line.quantity)
            record_event(db, line.product, "purchase", user_id=user_id, quantity=line.quantity)

        empty_cart(db, cart)
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Order placement", exc)

    db.refresh(order)
    logger.info("Order %s placed by %s, total %s", order.id, user_id, order.total)
    return order


def get_user_orders(db: Session, user_id: str) -> List[Order]:
    if not user_id:
        raise NotAuthenticated("User not authenticated")
    return (
        _with_items(db)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order_by_id(db: Session, user_id: str, order_id: int) -> Optional[Order]:
    """Return the order if the caller may see it, ``None`` otherwise."""
    profile = _profile(db, user_id)
    order = _with_items(db).filter(Order.id == order_id).first()
    if not order or not _is_visible(order, profile):
        return None
    return order


def get_order_history(db: Session, user_id: str, order_id: int) -> Optional[List[OrderHistory]]:
    order = get_order_by_id(db, user_id, order_id)
    if order is None:
        return None
    return list(order.history)


def get_order_logistics(db: Session, user_id: str, order_id: int) -> Optional[LogisticsTracking]:
    """Shipment of a visible order, ``None`` if hidden or not yet handed over."""
    order = get_order_by_id(db, user_id, order_id)
    if order is None:
        return None
    return get_logistics(db, order.id)


def get_seller_orders(db: Session, seller_id: str) -> List[Order]:
    if not seller_id:
        raise NotAuthenticated("User not authenticated")
    order_ids = select(OrderItem.order_id).where(OrderItem.seller_id == seller_id)
    return (
        _with_items(db)
        .filter(Order.id.in_(order_ids))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def _set_status(db: Session, order: Order, target: str, actor_id: str, notes: Optional[str]):
    seen = order.status
    ORDER_WORKFLOW.check(seen, target)

    result = db.execute(
        update(orders_table)
        .where(orders_table.c.id == order.id, orders_table.c.status == seen)
        .values(status=target, updated_at=func.now())
    )
    if result.rowcount == 0:
        raise InvalidTransition(f"Order {order.id} changed status concurrently")

    db.add(OrderHistory(order_id=order.id, status=target, notes=notes, created_by=actor_id))
    sync_logistics(db, order, target, actor_id)

    if target == "cancelled":
        for item in order.items:
            if item.product_id is not None:
                restock(db, item.product_id, item.quantity)


def cancel_order(db: Session, user_id: str, order_id: int) -> Order:
    if not user_id:
        raise NotAuthenticated("User not authenticated")

    order = _with_items(db).filter(Order.id == order_id, Order.user_id == user_id).first()
    if not order:
        raise NotFound("Order not found")

    try:
        _set_status(db, order, "cancelled", user_id, "Order cancelled by user")
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Order cancellation", exc)

    db.refresh(order)
    logger.info("Order %s cancelled by %s", order_id, user_id)
    return order


def update_order_status(
    db: Session, actor_id: str, order_id: int, status: str, notes: Optional[str] = None
) -> Order:
    profile = _profile(db, actor_id)
    allowed = ROLE_TARGETS.get(profile.role)
    if not allowed:
        raise PermissionDenied("Not allowed to change order status")

    order = _with_items(db).filter(Order.id == order_id).first()
    if not order or not _is_visible(order, profile):
        raise NotFound("Order not found")
    if status not in allowed:
        raise PermissionDenied(f"Role {profile.role} cannot set status {status}")

    try:
        _set_status(db, order, status, actor_id, notes or f"Order marked as {status.replace('_', ' ')}")
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Order status update", exc)

    db.refresh(order)
    logger.info("Order %s moved to %s by %s", order_id, status, actor_id)
    return order
