from pydantic import BaseModel, ConfigDict
from typing import Optional

# Output schema for the caller's profile
class ProfileResponse(BaseModel):
    id: str
    email: str
    name: str
    phone: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT payload contents
class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None
