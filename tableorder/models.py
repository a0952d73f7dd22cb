"""
SQLAlchemy Database Models

Tables:
- orders / order_items: table-side orders and their lines
- settings: store-level key/value switches edited from the admin page
- categories / menu_items / announcements: catalog shown to customers

Version: 1.0.0
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tableorder.database import Base

# Orders enter the system in this state; nothing in this service moves them on.
ORDER_STATUS_RECEIVED = "received"


class Order(Base):
    """
    Order header.

    ``total_amount`` is the final amount (subtotal + fee).
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    table_number = Column(String(20), nullable=False, index=True)
    headcount = Column(Integer, nullable=False)

    # =========================================================================
    # PRICING
    # =========================================================================
    subtotal = Column(Float, nullable=False)
    fee = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False)

    status = Column(String(20), nullable=False, default=ORDER_STATUS_RECEIVED, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order #{self.id} - table {self.table_number} - {self.status}>"


class OrderLine(Base):
    """One line of an order. ``menu_item_id`` is NULL for items not in the catalog."""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    selected_options = Column(JSON, nullable=True)  # {"spice": "mild", ...}

    order = relationship("Order", back_populates="lines")

    def __repr__(self):
        return f"<OrderLine order={self.order_id} item={self.menu_item_id} x{self.quantity}>"


class Setting(Base):
    """Store switch stored as text; see ``tableorder.store_settings`` for types."""
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    key = Column(String(50), nullable=False, unique=True)
    name = Column(JSON, nullable=False)  # {"zh": "...", "en": "..."}
    sort_order = Column(Integer, nullable=False, default=0)

    items = relationship("MenuItem", back_populates="category")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(JSON, nullable=False)
    description = Column(JSON, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    options = Column(JSON, nullable=True)  # ["spice", "sugar", ...]
    sort_order = Column(Integer, nullable=False, default=0)

    category = relationship("Category", back_populates="items")

    def __repr__(self):
        return f"<MenuItem #{self.id} {self.name}>"


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    content = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
