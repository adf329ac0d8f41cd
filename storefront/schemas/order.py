from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Literal
from datetime import datetime
from decimal import Decimal

OrderStatus = Literal["pending", "processing", "ready_for_pickup", "dispatched", "delivered", "cancelled"]


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    seller_id: Optional[str] = None
    product_name: str
    image: Optional[str] = None
    quantity: int
    price: Decimal
    line_total: Decimal


# Input schema for placing an order from the current cart
class OrderCreatePayload(BaseModel):
    address_id: int
    payment_method: Optional[str] = None

# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    user_id: str
    address_id: int
    status: str
    total: Decimal
    payment_method: Optional[str] = None
    payment_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]

# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None

class OrderHistoryOut(BaseModel):
    id: int
    status: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
