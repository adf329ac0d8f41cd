# storefront/schemas/donation.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional, Literal
from decimal import Decimal
from datetime import datetime

from storefront.schemas.product import ProductCreate

DonationStatus = Literal["pending", "approved", "fulfilled", "rejected"]
FulfillmentStatus = Literal["processing", "completed", "cancelled"]


# Fields a charitable organisation fills in; status and timestamps are server-side
class DonationRequestCreate(BaseModel):
    organization_name: str = Field(min_length=1)
    organization_type: str
    contact_name: str
    contact_email: EmailStr
    contact_phone: str

    food_types: List[str] = []
    is_vegetarian: bool = False
    is_non_vegetarian: bool = False
    is_perishable: bool = False
    is_non_perishable: bool = False
    quantity_required: str
    urgency_level: str
    usage_purpose: str
    dietary_restrictions: Optional[str] = None

    delivery_preference: str
    pickup_dates: Optional[str] = None
    pickup_times: Optional[str] = None
    storage_capability: Optional[List[str]] = None
    vehicle_available: bool = False

    service_area: str
    address: str
    landmark: Optional[str] = None
    operating_hours: str

    visibility: str = "public"
    duration: str = "one-time"
    recurring_frequency: Optional[str] = None
    is_priority: bool = False

    description: str
    people_served: str
    additional_info: Optional[str] = None


class DonationRequestOut(DonationRequestCreate):
    id: int
    status: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DonationStatusPatch(BaseModel):
    status: DonationStatus


# A single product allocation taken from the accepting seller's stock
class DonationAllocation(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class DonationAcceptPayload(BaseModel):
    products: List[DonationAllocation] = Field(min_length=1)
    notes: Optional[str] = None


class DonationFulfillmentOut(BaseModel):
    id: int
    request_id: int
    seller_id: str
    products: List[DonationAllocation]
    notes: str
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FulfillmentStatusPatch(BaseModel):
    status: FulfillmentStatus


# Direct donations: a seller gives stock away without a request
class ProductDonationCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    destination: str = Field(min_length=1)
    notes: Optional[str] = None
    value: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


# List a new product and donate part of it in one step
class NewProductDonationCreate(BaseModel):
    product: ProductCreate
    quantity: int = Field(gt=0)
    destination: str = Field(min_length=1)
    notes: Optional[str] = None


class ProductDonationOut(BaseModel):
    id: int
    product_id: int
    seller_id: str
    quantity: int
    destination: str
    notes: str
    value: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
