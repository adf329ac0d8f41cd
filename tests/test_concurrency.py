"""Interleaved writers on a shared database.

Each test holds a stale object in one session while the other session
commits a change, then checks that the stale writer fails cleanly instead
of overwriting the committed state.
"""
from decimal import Decimal

import pytest
from sqlalchemy import event

from storefront.errors import InvalidTransition
from storefront.models.address import Address
from storefront.models.cart import CartItem
from storefront.models.donation import DonationFulfillment, DonationRequest
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.tracking import ProductEvent
from storefront.models.users import Profile
from storefront.services import cart as cart_service
from storefront.services import donations as donation_service
from storefront.services import orders as order_service


def _seed(db, quantity=10):
    db.add_all([
        Profile(id="buyer-1", email="buyer@example.com", role="buyer"),
        Profile(id="seller-1", email="seller@example.com", role="seller"),
        Profile(id="admin-1", email="admin@example.com", role="admin"),
    ])
    product = Product(name="Organic Apples", price=Decimal("5.99"), category="food",
                      quantity=quantity, in_stock=quantity > 0, seller_id="seller-1")
    address = Address(user_id="buyer-1", name="Home", line1="1 Market Street", city="Springfield",
                      state="IL", postal_code="62701", country="US", is_default=True)
    db.add_all([product, address])
    db.commit()
    return product, address


def _quantity(db, product_id):
    return db.query(Product).filter(Product.id == product_id).populate_existing().one().quantity


def test_stale_cancel_loses_to_committed_status_change(two_sessions):
    first, second = two_sessions
    product, address = _seed(first, quantity=5)
    cart_service.add_to_cart(first, "buyer-1", product.id, 2)
    order = order_service.place_order(first, "buyer-1", address.id)

    # first still believes the order is pending
    assert order_service.get_order_by_id(first, "buyer-1", order.id).status == "pending"
    order_service.update_order_status(second, "admin-1", order.id, "processing")

    with pytest.raises(InvalidTransition):
        order_service.cancel_order(first, "buyer-1", order.id)

    status = second.query(Order.status).filter(Order.id == order.id).scalar()
    assert status == "processing"
    assert _quantity(second, product.id) == 3


def test_stale_fulfillment_cancel_restocks_once(two_sessions, donation_form):
    first, second = two_sessions
    product, _ = _seed(first)
    request = donation_service.submit_donation_request(first, donation_form())
    fulfillment = donation_service.accept_donation_request(
        first, request.id, "seller-1", [{"product_id": product.id, "quantity": 4}]
    )

    # Load into the second session while it is still processing
    assert second.query(DonationFulfillment).filter(DonationFulfillment.id == fulfillment.id).one().status == "processing"
    donation_service.update_fulfillment_status(first, "seller-1", fulfillment.id, "cancelled")
    assert _quantity(first, product.id) == 10

    with pytest.raises(InvalidTransition):
        donation_service.update_fulfillment_status(second, "seller-1", fulfillment.id, "cancelled")

    assert _quantity(second, product.id) == 10
    status = second.query(DonationFulfillment.status).filter(DonationFulfillment.id == fulfillment.id).scalar()
    assert status == "cancelled"


def test_stale_acceptance_of_rejected_request_changes_nothing(two_sessions, donation_form):
    first, second = two_sessions
    product, _ = _seed(first)
    request = donation_service.submit_donation_request(first, donation_form())

    assert second.query(DonationRequest).filter(DonationRequest.id == request.id).one().status == "pending"
    donation_service.update_donation_request_status(first, request.id, "rejected")

    with pytest.raises(InvalidTransition):
        donation_service.accept_donation_request(
            second, request.id, "seller-1", [{"product_id": product.id, "quantity": 3}]
        )

    assert second.query(DonationFulfillment).count() == 0
    assert _quantity(second, product.id) == 10
    status = second.query(DonationRequest.status).filter(DonationRequest.id == request.id).scalar()
    assert status == "rejected"


def test_concurrent_first_add_merges_into_one_line(two_sessions):
    first, second = two_sessions
    product, _ = _seed(first)
    cart_service.get_open_cart(first, "buyer-1")

    # The other session inserts the same line just before this one flushes
    def add_from_first(session, flush_context, instances):
        cart_service.add_to_cart(first, "buyer-1", product.id, 1)

    event.listen(second, "before_flush", add_from_first, once=True)
    out = cart_service.add_to_cart(second, "buyer-1", product.id, 2)

    assert [(item.product_id, item.quantity) for item in out.items] == [(product.id, 3)]
    assert second.query(CartItem).count() == 1
    assert second.query(ProductEvent).filter(ProductEvent.event_type == "cart").count() == 2
