# storefront/schemas/tracking.py
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime


class ProductEventOut(BaseModel):
    id: int
    product_id: int
    user_id: Optional[str] = None
    seller_id: str
    event_type: str
    quantity: int
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductActivity(BaseModel):
    product_id: int
    product_name: str
    views: int
    carts: int
    purchases: int
    donations: int


class ActivityTotals(BaseModel):
    views: int
    carts: int
    purchases: int
    donations: int


class TrackingSummary(BaseModel):
    products: List[ProductActivity]
    totals: ActivityTotals


class LogisticsTrackingOut(BaseModel):
    id: int
    order_id: int
    start_location: Optional[Dict[str, Any]] = None
    end_location: Optional[Dict[str, Any]] = None
    status: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
