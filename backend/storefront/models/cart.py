from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from storefront.db.database import Base


class CartItem(Base):
    """Session-keyed cart line. Schema only; nothing reads or writes carts yet."""

    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("session_id", "product_id"),)

    id = Column(Integer, primary_key=True)
    session_id = Column(String(255), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    product = relationship("Product")
