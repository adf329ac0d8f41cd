# storefront/models/order.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from storefront.database import Base, check_in

ORDER_STATUSES = ("pending", "processing", "ready_for_pickup", "dispatched", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed")

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=False)
    address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    status = Column(String(20), check_in("status", ORDER_STATUSES), default="pending",
                    nullable=False, index=True)

    # Captured once at placement, never recomputed
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(String, nullable=True)
    payment_status = Column(String(10), check_in("payment_status", PAYMENT_STATUSES),
                            default="pending", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    history = relationship(
        "OrderHistory", back_populates="order", cascade="all, delete-orphan", order_by="OrderHistory.id"
    )
    address = relationship("Address")

# Snapshot of a purchased line. Name, image and price are copied from the
# product so the order stays stable when the product is edited or removed.
class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), index=True, nullable=True)
    seller_id = Column(String(64), ForeignKey("profiles.id"), index=True, nullable=True)
    product_name = Column(String, nullable=False)
    image = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")

class OrderHistory(Base):
    __tablename__ = "order_history"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    status = Column(String(20), nullable=False)
    notes = Column(String, nullable=True)
    created_by = Column(String(64), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="history")
