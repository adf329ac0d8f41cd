# storefront/models/tracking.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from storefront.database import Base, check_in

EVENT_TYPES = ("view", "cart", "purchase", "donation")
LOGISTICS_STATUSES = ("waiting_pickup", "in_transit", "delivered")

# Activity on a product, shown to its seller; user_id is empty for anonymous views
class ProductEvent(Base):
    __tablename__ = "product_tracking"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    user_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=True)
    seller_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=False)
    event_type = Column(String(20), check_in("event_type", EVENT_TYPES), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")


# Pickup-to-delivery leg of an order. Locations are address snapshots so
# later edits to the address book do not move a shipment.
class LogisticsTracking(Base):
    __tablename__ = "logistics_tracking"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, index=True, nullable=False)
    start_location = Column(JSON, nullable=True)
    end_location = Column(JSON, nullable=True)
    status = Column(String(20), check_in("status", LOGISTICS_STATUSES), nullable=False, default="waiting_pickup")
    created_by = Column(String(64), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
