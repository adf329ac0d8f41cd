from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class AddressBase(BaseModel):
    name: str = Field(min_length=1)
    line1: str = Field(min_length=1)
    line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool = False


class AddressCreate(AddressBase):
    pass


# Schema for partial address updates
class AddressUpdate(BaseModel):
    name: Optional[str] = None
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("name", "line1", "city", "state", "postal_code", "country", "is_default")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class AddressOut(AddressBase):
    id: int
    user_id: str

    model_config = ConfigDict(from_attributes=True)
