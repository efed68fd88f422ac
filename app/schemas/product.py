import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "jpg", "png"}
ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/pjpeg"}


class ProductFields(BaseModel):
    """
    Typed scalar fields of a product create or update request.

    Built from the multipart form at the API boundary, so the service layer
    never sees raw request data.
    """
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: str = Field(..., min_length=1, description="Short description")
    long_description: Optional[str] = Field(None, description="Long description")
    status: bool = Field(..., description="Whether the product is active")
    stock: int = Field(..., description="Available stock")
    price: float = Field(..., allow_inf_nan=False, description="Unit price")
    weight: float = Field(..., allow_inf_nan=False, description="Shipping weight")
    category_id: int = Field(..., description="ID of an existing category")
    color_id: int = Field(..., description="ID of an existing color")
    size: Optional[str] = Field(None, max_length=255, description="Size label")
    seo_keywords: Optional[str] = Field(None, max_length=512, description="SEO keywords")
    product_group_id: Optional[int] = Field(None, description="Product group ID")


@dataclass
class ImageUpload:
    """An uploaded image file, read into memory."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lstrip(".").lower()

    def is_allowed(self) -> bool:
        if self.extension not in ALLOWED_IMAGE_EXTENSIONS:
            return False
        if self.content_type and self.content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            return False
        return True


class PriceUpdate(BaseModel):
    price: float = Field(..., allow_inf_nan=False, description="New unit price")


class StockUpdate(BaseModel):
    stock: int = Field(..., description="New stock level")


class GroupUpdate(BaseModel):
    product_group_id: int = Field(..., description="Product group to assign")


class StatusUpdate(BaseModel):
    status: bool = Field(..., description="Active flag")


class ProductResponse(BaseModel):
    """Schema for product response including all fields."""
    id: int
    name: str
    description: str
    long_description: Optional[str] = None
    slug: str
    image1: Optional[str] = None
    image2: Optional[str] = None
    image3: Optional[str] = None
    image4: Optional[str] = None
    image5: Optional[str] = None
    status: bool
    stock: int
    price: float
    weight: float
    category_id: int
    color_id: int
    size: Optional[str] = None
    seo_keywords: Optional[str] = None
    product_group_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
