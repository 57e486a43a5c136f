from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, JSON, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from storefront.db.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="SET NULL"), index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True)
    scale = Column(String(50), default="1:18")
    price = Column(Numeric(10, 2), nullable=False, index=True)
    original_price = Column(Numeric(10, 2))
    description = Column(Text)
    features = Column(JSON)
    specifications = Column(JSON)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    is_new = Column(Boolean, nullable=False, default=False)
    rating = Column(Numeric(3, 2), default=0)
    review_count = Column(Integer, default=0)
    image_url = Column(Text)
    gallery_urls = Column(JSON)
    meta_title = Column(String(255))
    meta_description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="products")
    category = relationship("Category", back_populates="products")
