from storefront.models.users import Profile
from storefront.models.address import Address
from storefront.models.product import Product
from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem, OrderHistory
from storefront.models.saved import SavedProduct
from storefront.models.donation import DonationRequest, DonationFulfillment, ProductDonation
from storefront.models.tracking import ProductEvent, LogisticsTracking
from storefront.models.log import Log

__all__ = [
    "Profile",
    "Address",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderHistory",
    "SavedProduct",
    "DonationRequest",
    "DonationFulfillment",
    "ProductDonation",
    "ProductEvent",
    "LogisticsTracking",
    "Log",
]
