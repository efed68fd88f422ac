from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base

IMAGE_FIELDS = ("image1", "image2", "image3", "image4", "image5")


class Category(Base):
    """Product category referenced by `Product.category_id`."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Color(Base):
    """Product color referenced by `Product.color_id`."""
    __tablename__ = "colors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Color(id={self.id}, name='{self.name}')>"


class Product(Base):
    """
    Product model representing a catalog item.

    Attributes:
        id: Unique identifier for the product
        name: Display name
        slug: Unique URL-safe identifier derived from the name at creation
        image1..image5: Stored file paths on the public disk (or None)
        status: Whether the product is active
        stock: Available quantity
        price: Unit price
        weight: Shipping weight
        category_id: Reference to the product category
        color_id: Reference to the product color
        product_group_id: Optional grouping of product variants
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    long_description = Column(Text, nullable=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)

    image1 = Column(String(512), nullable=True)
    image2 = Column(String(512), nullable=True)
    image3 = Column(String(512), nullable=True)
    image4 = Column(String(512), nullable=True)
    image5 = Column(String(512), nullable=True)

    status = Column(Boolean, nullable=False, default=False)
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False)
    weight = Column(Numeric(10, 3), nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=False, index=True)
    size = Column(String(255), nullable=True)
    seo_keywords = Column(String(512), nullable=True)
    product_group_id = Column(Integer, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category")
    color = relationship("Color")

    def image_paths(self) -> dict:
        """Return the non-empty image slots as a {slot: path} mapping."""
        return {
            field: getattr(self, field)
            for field in IMAGE_FIELDS
            if getattr(self, field)
        }

    def __repr__(self):
        return f"<Product(id={self.id}, slug='{self.slug}', stock={self.stock})>"
