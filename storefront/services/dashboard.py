# storefront/services/dashboard.py
from decimal import Decimal
from typing import Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.cart import Cart, CartItem
from storefront.models.donation import DonationRequest, DonationFulfillment, ProductDonation
from storefront.models.order import Order, OrderItem
from storefront.models.product import Product
from storefront.models.saved import SavedProduct
from storefront.models.users import Profile
from storefront.schemas.dashboard import BuyerSummary, SellerSummary, AdminSummary
from storefront.services.cart import CENT


def _counts_by(db: Session, column, *filters) -> Dict[str, int]:
    rows = db.query(column, func.count()).filter(*filters).group_by(column).all()
    return {key: count for key, count in rows}


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT)


def buyer_summary(db: Session, user_id: str) -> BuyerSummary:
    orders_by_status = _counts_by(db, Order.status, Order.user_id == user_id)

    cart_items, cart_total = (
        db.query(
            func.coalesce(func.sum(CartItem.quantity), 0),
            func.sum(CartItem.quantity * Product.price),
        )
        .join(Cart, Cart.id == CartItem.cart_id)
        .join(Product, Product.id == CartItem.product_id)
        .filter(Cart.user_id == user_id)
        .one()
    )
    saved = db.query(SavedProduct).filter(SavedProduct.user_id == user_id).count()

    return BuyerSummary(
        orders_by_status=orders_by_status,
        total_orders=sum(orders_by_status.values()),
        cart_items=int(cart_items),
        cart_total=_money(cart_total),
        saved_products=saved,
    )


def seller_summary(db: Session, seller_id: str) -> SellerSummary:
    products = db.query(Product).filter(Product.seller_id == seller_id)

    # Revenue from the seller's own lines; cancelled orders do not count
    revenue = (
        db.query(func.sum(OrderItem.price * OrderItem.quantity))
        .join(Order, Order.id == OrderItem.order_id)
        .filter(OrderItem.seller_id == seller_id, Order.status != "cancelled")
        .scalar()
    )
    orders = (
        db.query(func.count(func.distinct(OrderItem.order_id)))
        .filter(OrderItem.seller_id == seller_id)
        .scalar()
    )
    donations = (
        db.query(DonationFulfillment)
        .filter(DonationFulfillment.seller_id == seller_id, DonationFulfillment.status != "cancelled")
        .count()
    )

    direct_donations, units_donated = (
        db.query(func.count(ProductDonation.id), func.coalesce(func.sum(ProductDonation.quantity), 0))
        .filter(ProductDonation.seller_id == seller_id)
        .one()
    )

    return SellerSummary(
        products=products.count(),
        low_stock_products=products.filter(Product.quantity < settings.LOW_STOCK_THRESHOLD).count(),
        out_of_stock_products=products.filter(Product.quantity == 0).count(),
        orders=orders or 0,
        revenue=_money(revenue),
        donations_fulfilled=donations,
        direct_donations=direct_donations,
        units_donated=int(units_donated),
    )


def admin_summary(db: Session) -> AdminSummary:
    revenue = db.query(func.sum(Order.total)).filter(Order.status != "cancelled").scalar()
    return AdminSummary(
        users_by_role=_counts_by(db, Profile.role),
        orders_by_status=_counts_by(db, Order.status),
        donation_requests_by_status=_counts_by(db, DonationRequest.status),
        revenue=_money(revenue),
    )
