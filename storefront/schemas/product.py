# storefront/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Literal
from decimal import Decimal
from datetime import date, datetime

Priority = Literal["low", "medium", "high"]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    description: str = ""
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1)
    image: str = ""
    perishable: bool = False
    expiry_date: Optional[date] = None
    priority: Priority = "medium"
    company: str = ""
    quantity: int = Field(default=0, ge=0)


# Schema for creating a new product; in_stock is derived from quantity
class ProductCreate(ProductBase):
    pass


# Schema for partial product updates
class ProductEditRequest(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    perishable: Optional[bool] = None
    expiry_date: Optional[date] = None
    priority: Optional[Priority] = None
    company: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)

    # Omitting a field leaves it unchanged; only expiry_date may be cleared with null
    @field_validator(
        "name", "description", "price", "category", "image",
        "perishable", "priority", "company", "quantity",
    )
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


# Full product representation including ID
class ProductOut(ProductBase):
    id: int
    in_stock: bool
    rating: Optional[float] = None
    seller_id: str
    created_at: Optional[datetime] = None


# Compact product view embedded in cart lines and saved products
class ProductSnapshot(ORMBase):
    id: int
    name: str
    price: Decimal
    image: str
    category: str
    in_stock: bool
    quantity: int
    seller_id: str


class ProductList(ORMBase):
    items: List[ProductOut]
    total: int
