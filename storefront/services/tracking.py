# storefront/services/tracking.py
"""Product activity events and order logistics.

Events are written next to the action they describe (views, cart adds,
purchases, donations) and share that action's transaction, so
:func:`record_event` never commits. Logistics rows follow the order status:
one row per order, opened when the seller hands the goods over.
"""
import logging
from collections import defaultdict
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.errors import NotFound, PermissionDenied
from storefront.models.address import Address
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.tracking import ProductEvent, LogisticsTracking
from storefront.workflow import LOGISTICS_WORKFLOW

logger = logging.getLogger(__name__)

# Order status -> shipment status it moves the logistics row to
ORDER_TO_SHIPMENT = {
    "ready_for_pickup": "waiting_pickup",
    "dispatched": "in_transit",
    "delivered": "delivered",
}

ADDRESS_FIELDS = ("name", "line1", "line2", "city", "state", "postal_code", "country")


def record_event(
    db: Session,
    product: Product,
    event_type: str,
    user_id: Optional[str] = None,
    quantity: int = 1,
    details: Optional[dict] = None,
) -> ProductEvent:
    event = ProductEvent(
        product_id=product.id,
        seller_id=product.seller_id,
        user_id=user_id,
        event_type=event_type,
        quantity=quantity,
        details=details,
    )
    db.add(event)
    return event


def record_view(db: Session, product: Product, user_id: Optional[str] = None) -> ProductEvent:
    event = record_event(db, product, "view", user_id=user_id)
    db.commit()
    return event


def list_seller_events(db: Session, seller_id: str, event_type: Optional[str] = None) -> List[ProductEvent]:
    query = db.query(ProductEvent).filter(ProductEvent.seller_id == seller_id)
    if event_type:
        query = query.filter(ProductEvent.event_type == event_type)
    return query.order_by(ProductEvent.created_at.desc(), ProductEvent.id.desc()).all()


def list_buyer_events(db: Session, user_id: str) -> List[ProductEvent]:
    return (
        db.query(ProductEvent)
        .filter(ProductEvent.user_id == user_id)
        .order_by(ProductEvent.created_at.desc(), ProductEvent.id.desc())
        .all()
    )


def list_product_events(db: Session, seller_id: str, product_id: int) -> List[ProductEvent]:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFound("Product not found")
    if product.seller_id != seller_id:
        raise PermissionDenied("You can only view tracking for your own products")
    return (
        db.query(ProductEvent)
        .filter(ProductEvent.product_id == product_id)
        .order_by(ProductEvent.created_at.desc(), ProductEvent.id.desc())
        .all()
    )


def seller_tracking_summary(db: Session, seller_id: str) -> dict:
    """Per-product counts of each event type, plus totals across products.

    Views count events; carts, purchases and donations count units.
    """
    names = dict(db.query(Product.id, Product.name).filter(Product.seller_id == seller_id).all())
    per_product = defaultdict(lambda: {"views": 0, "carts": 0, "purchases": 0, "donations": 0})
    key = {"view": "views", "cart": "carts", "purchase": "purchases", "donation": "donations"}

    for event in db.query(ProductEvent).filter(ProductEvent.seller_id == seller_id):
        counts = per_product[event.product_id]
        counts[key[event.event_type]] += 1 if event.event_type == "view" else event.quantity

    products = [
        {"product_id": pid, "product_name": names.get(pid, ""), **counts}
        for pid, counts in sorted(per_product.items())
    ]
    totals = {name: sum(p[name] for p in products) for name in ("views", "carts", "purchases", "donations")}
    return {"products": products, "totals": totals}


def _snapshot(address: Optional[Address]) -> Optional[dict]:
    if address is None:
        return None
    return {field: getattr(address, field) for field in ADDRESS_FIELDS}


def _default_address(db: Session, user_id: str) -> Optional[Address]:
    return (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.id)
        .first()
    )


def sync_logistics(db: Session, order: Order, status: str, actor_id: str) -> Optional[LogisticsTracking]:
    """Move the order's logistics row along with its status. Does not commit.

    The row is created on the first status that hands goods over, with the
    acting user's default address as pickup point and the order address as
    destination. Statuses before hand-over leave logistics untouched.
    """
    target = ORDER_TO_SHIPMENT.get(status)
    if target is None:
        return None

    tracking = db.query(LogisticsTracking).filter(LogisticsTracking.order_id == order.id).first()
    if tracking is None:
        tracking = LogisticsTracking(
            order_id=order.id,
            start_location=_snapshot(_default_address(db, actor_id)),
            end_location=_snapshot(db.get(Address, order.address_id)),
            status=target,
            created_by=actor_id,
        )
        db.add(tracking)
        logger.info("Logistics opened for order %s at %s", order.id, target)
    elif tracking.status != target:
        LOGISTICS_WORKFLOW.check(tracking.status, target)
        tracking.status = target
    return tracking


def get_logistics(db: Session, order_id: int) -> Optional[LogisticsTracking]:
    return db.query(LogisticsTracking).filter(LogisticsTracking.order_id == order_id).first()
