from pydantic import BaseModel
from typing import Dict
from decimal import Decimal


class BuyerSummary(BaseModel):
    orders_by_status: Dict[str, int]
    total_orders: int
    cart_items: int
    cart_total: Decimal
    saved_products: int


class SellerSummary(BaseModel):
    products: int
    low_stock_products: int
    out_of_stock_products: int
    orders: int
    revenue: Decimal
    donations_fulfilled: int
    direct_donations: int
    units_donated: int


class AdminSummary(BaseModel):
    users_by_role: Dict[str, int]
    orders_by_status: Dict[str, int]
    donation_requests_by_status: Dict[str, int]
    revenue: Decimal
