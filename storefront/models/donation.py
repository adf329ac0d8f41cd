# storefront/models/donation.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, JSON, Numeric, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base

# Request for donated goods submitted by a charitable organisation.
# Submitters do not need an account, so user_id is optional.
class DonationRequest(Base):
    __tablename__ = "donation_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=True)

    # Organisation and contact
    organization_name = Column(String, nullable=False)
    organization_type = Column(String, nullable=False)
    contact_name = Column(String, nullable=False)
    contact_email = Column(String, nullable=False)
    contact_phone = Column(String, nullable=False)

    # What is needed
    food_types = Column(JSON, nullable=False, default=list)
    is_vegetarian = Column(Boolean, nullable=False, default=False)
    is_non_vegetarian = Column(Boolean, nullable=False, default=False)
    is_perishable = Column(Boolean, nullable=False, default=False)
    is_non_perishable = Column(Boolean, nullable=False, default=False)
    quantity_required = Column(String, nullable=False)
    urgency_level = Column(String, nullable=False, index=True)
    usage_purpose = Column(String, nullable=False)
    dietary_restrictions = Column(String, nullable=True)

    # Logistics preferences
    delivery_preference = Column(String, nullable=False)
    pickup_dates = Column(String, nullable=True)
    pickup_times = Column(String, nullable=True)
    storage_capability = Column(JSON, nullable=True)
    vehicle_available = Column(Boolean, nullable=False, default=False)

    # Location
    service_area = Column(String, nullable=False)
    address = Column(String, nullable=False)
    landmark = Column(String, nullable=True)
    operating_hours = Column(String, nullable=False)

    visibility = Column(String, nullable=False, default="public")
    duration = Column(String, nullable=False, default="one-time")
    recurring_frequency = Column(String, nullable=True)
    is_priority = Column(Boolean, nullable=False, default=False)

    description = Column(String, nullable=False)
    people_served = Column(String, nullable=False)
    additional_info = Column(String, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    fulfillments = relationship("DonationFulfillment", back_populates="request")


# Created when a seller accepts a request; products holds the
# [{"product_id": .., "quantity": ..}] allocations taken from stock
class DonationFulfillment(Base):
    __tablename__ = "donation_fulfillments"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("donation_requests.id"), index=True, nullable=False)
    seller_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=False)
    products = Column(JSON, nullable=False)
    notes = Column(String, nullable=False, default="")
    status = Column(String(20), nullable=False, default="processing")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    request = relationship("DonationRequest", back_populates="fulfillments")


# Stock a seller gives away directly, outside any donation request
class ProductDonation(Base):
    __tablename__ = "product_donations"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    seller_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    destination = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    value = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")
