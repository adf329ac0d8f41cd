# storefront/models/users.py
from sqlalchemy import Column, String, DateTime, func
from storefront.database import Base, check_in

ROLES = ("buyer", "seller", "logistics", "admin")

# Profile of an account managed by the identity provider.
# The id is the provider's subject claim, so it is a string rather than a serial.
class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, default="")
    phone = Column(String, nullable=True)
    role = Column(String(20), check_in("role", ROLES),
                  nullable=False, default="buyer")
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
