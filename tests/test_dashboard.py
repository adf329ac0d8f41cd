from decimal import Decimal

from storefront.populate_db import populate_database, DEMO_PRODUCTS
from storefront.models.product import Product
from storefront.models.users import Profile
from storefront.services import cart as cart_service
from storefront.services import dashboard
from storefront.services import orders as order_service
from storefront.services import saved as saved_service


def test_buyer_summary(db, buyer, make_address, make_product):
    address = make_address(buyer.id)
    a = make_product(name="Apples", price="2.50", quantity=10)
    b = make_product(name="Jacket", price="40.00", quantity=10)

    cart_service.add_to_cart(db, buyer.id, a.id, 2)
    order = order_service.place_order(db, buyer.id, address.id)
    order_service.cancel_order(db, buyer.id, order.id)
    cart_service.add_to_cart(db, buyer.id, b.id, 1)
    order_service.place_order(db, buyer.id, address.id)
    cart_service.add_to_cart(db, buyer.id, a.id, 4)
    saved_service.save(db, buyer.id, b.id)

    summary = dashboard.buyer_summary(db, buyer.id)
    assert summary.orders_by_status == {"pending": 1, "cancelled": 1}
    assert summary.total_orders == 2
    assert summary.cart_items == 4
    assert summary.cart_total == Decimal("10.00")
    assert summary.saved_products == 1


def test_buyer_summary_for_new_user(db, buyer):
    summary = dashboard.buyer_summary(db, buyer.id)
    assert summary.total_orders == 0
    assert summary.cart_items == 0
    assert summary.cart_total == Decimal("0.00")


def test_seller_and_admin_summaries(db, buyer, seller, make_address, make_product):
    address = make_address(buyer.id)
    make_product(name="Empty shelf", quantity=0)
    low = make_product(name="Jacket", price="50.00", quantity=3)
    make_product(name="Apples", quantity=100)

    cart_service.add_to_cart(db, buyer.id, low.id, 2)
    order_service.place_order(db, buyer.id, address.id)

    summary = dashboard.seller_summary(db, seller.id)
    assert summary.products == 3
    assert summary.out_of_stock_products == 1
    assert summary.low_stock_products == 2
    assert summary.orders == 1
    assert summary.revenue == Decimal("100.00")
    assert summary.donations_fulfilled == 0

    admin = dashboard.admin_summary(db)
    assert admin.users_by_role == {"buyer": 1, "seller": 1}
    assert admin.orders_by_status == {"pending": 1}
    assert admin.revenue == Decimal("100.00")


def test_populate_database_loads_demo_catalog(db, make_product):
    make_product(name="Stale")

    populate_database(db)

    names = sorted(p.name for p in db.query(Product).all())
    assert names == sorted(p["name"] for p in DEMO_PRODUCTS)
    assert db.query(Profile).filter(Profile.id == "demo-seller").one().role == "seller"
