from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from storefront.schemas.product import ProductOut


class SaveProductRequest(BaseModel):
    product_id: int


class SavedProductOut(BaseModel):
    id: int
    product_id: int
    created_at: Optional[datetime] = None
    product: ProductOut

    model_config = ConfigDict(from_attributes=True)


class SavedState(BaseModel):
    product_id: int
    saved: bool
