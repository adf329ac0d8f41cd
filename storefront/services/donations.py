# storefront/services/donations.py
"""Donation requests from charitable organisations, their fulfilment, and
direct donations sellers make without a request.

Accepting a request marks it fulfilled, records the fulfilment and takes every
allocated unit out of the seller's stock in one transaction. Cancelling the
fulfilment restocks the units and reopens the request. Direct donations
decrement stock and record the donation together.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import StorefrontError, NotAuthenticated, NotFound, InvalidRequest, InvalidTransition
from storefront.models.donation import DonationRequest, DonationFulfillment, ProductDonation
from storefront.services.catalog import decrement_stock, restock, new_product
from storefront.services.tracking import record_event
from storefront.utils.transactions import rollback_and_raise
from storefront.workflow import DONATION_WORKFLOW, FULFILLMENT_WORKFLOW

logger = logging.getLogger(__name__)

requests_table = DonationRequest.__table__
fulfillments_table = DonationFulfillment.__table__

# Fields a submitter may not set
SERVER_FIELDS = {"id", "status", "created_at", "updated_at", "user_id"}


def submit_donation_request(db: Session, data: dict, user_id: Optional[str] = None) -> DonationRequest:
    """Record a new request. Works without an account; status always starts at pending."""
    fields = {k: v for k, v in data.items() if k not in SERVER_FIELDS}
    request = DonationRequest(**fields, user_id=user_id, status=DONATION_WORKFLOW.initial)
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Donation request %s submitted by %s", request.id, request.organization_name)
    return request


def list_donation_requests(
    db: Session, status: Optional[str] = None, urgency: Optional[str] = None
) -> List[DonationRequest]:
    query = db.query(DonationRequest)
    if urgency:
        # Browsing by urgency only shows requests an admin has approved
        query = query.filter(DonationRequest.urgency_level == urgency, DonationRequest.status == "approved")
    elif status:
        query = query.filter(DonationRequest.status == status)
    return query.order_by(DonationRequest.created_at.desc(), DonationRequest.id.desc()).all()


def get_donation_request(db: Session, request_id: int) -> Optional[DonationRequest]:
    return db.query(DonationRequest).filter(DonationRequest.id == request_id).first()


def _set_request_status(db: Session, request: DonationRequest, target: str):
    seen = request.status
    DONATION_WORKFLOW.check(seen, target)
    result = db.execute(
        update(requests_table)
        .where(requests_table.c.id == request.id, requests_table.c.status == seen)
        .values(status=target, updated_at=func.now())
    )
    if result.rowcount == 0:
        raise InvalidTransition(f"Donation request {request.id} changed status concurrently")


def update_donation_request_status(db: Session, request_id: int, status: str) -> DonationRequest:
    request = get_donation_request(db, request_id)
    if not request:
        raise NotFound("Donation request not found")
    if request.status == "fulfilled":
        raise InvalidTransition("Cancel the fulfillment to reopen a fulfilled request")

    try:
        _set_request_status(db, request, status)
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Donation status update", exc)

    db.refresh(request)
    return request


def _normalize_allocations(allocations: Iterable) -> List[dict]:
    normalized = []
    for alloc in allocations:
        if not isinstance(alloc, dict):
            alloc = alloc.model_dump()
        quantity = int(alloc["quantity"])
        if quantity < 1:
            raise InvalidRequest("Allocated quantity must be at least 1")
        normalized.append({"product_id": int(alloc["product_id"]), "quantity": quantity})
    if not normalized:
        raise InvalidRequest("At least one product must be allocated")
    return normalized


def accept_donation_request(
    db: Session,
    request_id: int,
    seller_id: str,
    allocations: Iterable,
    notes: Optional[str] = None,
) -> DonationFulfillment:
    if not seller_id:
        raise NotAuthenticated("User not authenticated")
    products = _normalize_allocations(allocations)

    request = get_donation_request(db, request_id)
    if not request:
        raise NotFound("Donation request not found")

    try:
        _set_request_status(db, request, "fulfilled")

        fulfillment = DonationFulfillment(
            request_id=request.id,
            seller_id=seller_id,
            products=products,
            notes=notes or "",
            status=FULFILLMENT_WORKFLOW.initial,
        )
        db.add(fulfillment)

        # Only the accepting seller's own products can be allocated
        for alloc in products:
            product = decrement_stock(db, alloc["product_id"], alloc["quantity"], seller_id=seller_id)
            record_event(db, product, "donation", quantity=alloc["quantity"],
                         details={"request_id": request.id, "organization": request.organization_name})

        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Donation acceptance", exc)

    db.refresh(fulfillment)
    logger.info("Donation request %s accepted by seller %s", request_id, seller_id)
    return fulfillment


def list_fulfillments(
    db: Session, seller_id: Optional[str] = None, request_id: Optional[int] = None
) -> List[DonationFulfillment]:
    query = db.query(DonationFulfillment)
    if seller_id:
        query = query.filter(DonationFulfillment.seller_id == seller_id)
    if request_id:
        query = query.filter(DonationFulfillment.request_id == request_id)
    return query.order_by(DonationFulfillment.created_at.desc(), DonationFulfillment.id.desc()).all()


def update_fulfillment_status(db: Session, seller_id: str, fulfillment_id: int, status: str) -> DonationFulfillment:
    fulfillment = db.query(DonationFulfillment).filter(
        DonationFulfillment.id == fulfillment_id, DonationFulfillment.seller_id == seller_id
    ).first()
    if not fulfillment:
        raise NotFound("Fulfillment not found")

    seen = fulfillment.status
    try:
        FULFILLMENT_WORKFLOW.check(seen, status)
        result = db.execute(
            update(fulfillments_table)
            .where(fulfillments_table.c.id == fulfillment.id, fulfillments_table.c.status == seen)
            .values(status=status)
        )
        if result.rowcount == 0:
            raise InvalidTransition(f"Fulfillment {fulfillment.id} changed status concurrently")

        if status == "cancelled":
            # Goods never left the seller, put them back on the shelf
            for alloc in fulfillment.products:
                restock(db, alloc["product_id"], alloc["quantity"])
            request = (
                db.query(DonationRequest)
                .filter(DonationRequest.id == fulfillment.request_id)
                .populate_existing()
                .first()
            )
            if request is not None and request.status == "fulfilled":
                _set_request_status(db, request, "approved")
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Fulfillment status update", exc)

    db.refresh(fulfillment)
    return fulfillment


def _record_direct_donation(
    db: Session, product, seller_id: str, quantity: int, destination: str,
    notes: Optional[str], value: Optional[Decimal],
) -> ProductDonation:
    if value is None:
        value = Decimal(product.price) * quantity
    donation = ProductDonation(
        product_id=product.id,
        seller_id=seller_id,
        quantity=quantity,
        destination=destination,
        notes=notes or "",
        value=value,
    )
    db.add(donation)
    record_event(db, product, "donation", quantity=quantity, details={"destination": destination})
    return donation


def donate_product(
    db: Session,
    seller_id: str,
    product_id: int,
    quantity: int,
    destination: str,
    notes: Optional[str] = None,
    value: Optional[Decimal] = None,
) -> ProductDonation:
    """Give ``quantity`` units of one of the seller's products away.

    The stock decrement and the donation record commit together. ``value``
    defaults to the current price of the donated units.
    """
    if not seller_id:
        raise NotAuthenticated("User not authenticated")

    try:
        product = decrement_stock(db, product_id, quantity, seller_id=seller_id)
        donation = _record_direct_donation(db, product, seller_id, quantity, destination, notes, value)
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Product donation", exc)

    db.refresh(donation)
    logger.info("Seller %s donated %s x%s to %s", seller_id, product_id, quantity, destination)
    return donation


def donate_new_product(
    db: Session,
    seller_id: str,
    product_data: dict,
    quantity: int,
    destination: str,
    notes: Optional[str] = None,
) -> ProductDonation:
    """List a new product and donate part of its stock in one transaction."""
    if not seller_id:
        raise NotAuthenticated("User not authenticated")
    if quantity > product_data.get("quantity", 0):
        raise InvalidRequest("Cannot donate more than the listed quantity")

    try:
        product = new_product(db, seller_id, product_data)
        db.flush()
        product = decrement_stock(db, product.id, quantity, seller_id=seller_id)
        donation = _record_direct_donation(db, product, seller_id, quantity, destination, notes, None)
        db.commit()
    except (StorefrontError, SQLAlchemyError) as exc:
        rollback_and_raise(db, "Product donation", exc)

    db.refresh(donation)
    logger.info("Seller %s listed and donated product %s x%s", seller_id, donation.product_id, quantity)
    return donation


def list_product_donations(db: Session, seller_id: str) -> List[ProductDonation]:
    return (
        db.query(ProductDonation)
        .filter(ProductDonation.seller_id == seller_id)
        .order_by(ProductDonation.created_at.desc(), ProductDonation.id.desc())
        .all()
    )
