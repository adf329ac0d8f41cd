from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal

from storefront.schemas.product import ProductSnapshot

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating cart item quantity; anything below 1 removes the line
class CartUpdateItem(BaseModel):
    quantity: int

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    line_total: Decimal
    product: ProductSnapshot

    model_config = ConfigDict(from_attributes=True)

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    total: Decimal
    item_count: int
