# storefront/models/product.py
from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, Float, Numeric,
    ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from storefront.database import Base, check_in

PRIORITIES = ("low", "medium", "high")

# Model Product
# A catalog entry listed by one seller. quantity is the only stock counter;
# in_stock mirrors quantity > 0 after every inventory change.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False, default="")

    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    category = Column(String, nullable=False, index=True)
    image = Column(String, nullable=False, default="")

    perishable = Column(Boolean, nullable=False, default=False)
    expiry_date = Column(Date, nullable=True)
    priority = Column(String(10), check_in("priority", PRIORITIES),
                      nullable=False, default="medium")
    company = Column(String, nullable=False, default="")

    # Inventory
    in_stock = Column(Boolean, nullable=False, default=True)
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)

    rating = Column(Float, nullable=True)
    seller_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    seller = relationship("Profile")
