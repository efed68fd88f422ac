from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.api.deps import get_current_admin, get_product_service
from app.models.admin import Admin
from app.models.product import IMAGE_FIELDS
from app.schemas.product import (
    ALLOWED_IMAGE_EXTENSIONS,
    GroupUpdate,
    ImageUpload,
    PriceUpdate,
    ProductFields,
    StatusUpdate,
    StockUpdate,
)
from app.services.product_service import ProductService
from app.utils.responses import send_result

router = APIRouter(prefix="/products", tags=["Products"])


def product_fields_form(
    name: str = Form(..., description="Product name"),
    description: str = Form(..., description="Short description"),
    long_description: Optional[str] = Form(None),
    status: bool = Form(..., description="Active flag (true/false, 1/0, on/off)"),
    stock: int = Form(...),
    price: float = Form(..., allow_inf_nan=False),
    weight: float = Form(..., allow_inf_nan=False),
    category_id: int = Form(..., description="ID of an existing category"),
    color_id: int = Form(..., description="ID of an existing color"),
    size: Optional[str] = Form(None),
    seo_keywords: Optional[str] = Form(None),
    product_group_id: Optional[int] = Form(None),
) -> ProductFields:
    """Build the typed product input from multipart form fields."""
    try:
        return ProductFields(
            name=name,
            description=description,
            long_description=long_description,
            status=status,
            stock=stock,
            price=price,
            weight=weight,
            category_id=category_id,
            color_id=color_id,
            size=size,
            seo_keywords=seo_keywords,
            product_group_id=product_group_id,
        )
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        )


async def image_uploads_form(
    image1: Optional[UploadFile] = File(None),
    image2: Optional[UploadFile] = File(None),
    image3: Optional[UploadFile] = File(None),
    image4: Optional[UploadFile] = File(None),
    image5: Optional[UploadFile] = File(None),
) -> dict[str, ImageUpload]:
    """Read the uploaded image slots, rejecting files that are not jpeg or png."""
    files = dict(zip(IMAGE_FIELDS, (image1, image2, image3, image4, image5)))
    uploads = {}
    errors = []
    for slot, file in files.items():
        if file is None or not file.filename:
            continue
        upload = ImageUpload(
            filename=file.filename,
            content=await file.read(),
            content_type=file.content_type,
        )
        if not upload.is_allowed():
            allowed = ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
            errors.append({
                "loc": ("body", slot),
                "msg": f"The {slot} must be a file of type: {allowed}.",
                "type": "value_error",
            })
            continue
        uploads[slot] = upload

    if errors:
        raise RequestValidationError(errors)
    return uploads


@router.get(
    "",
    summary="List all products",
)
def list_products(service: ProductService = Depends(get_product_service)):
    return send_result(service.list_all(), "Products retrieved successfully.")


@router.get(
    "/slug/{slug}",
    summary="Get product by slug",
)
def get_product_by_slug(slug: str, service: ProductService = Depends(get_product_service)):
    return send_result(service.get_by_slug(slug), "Product retrieved successfully.")


@router.get(
    "/group/{group_id}",
    summary="List products in a group",
)
def list_products_by_group(group_id: int, service: ProductService = Depends(get_product_service)):
    return send_result(service.list_by_group(group_id), "Products retrieved successfully.")


@router.get(
    "/{product_id}",
    summary="Get product by ID",
    description="Get a product by ID. Results are cached in Redis."
)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return send_result(service.get_by_id(product_id), "Product retrieved successfully.")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product from a multipart form with up to five images."
)
def create_product(
    fields: ProductFields = Depends(product_fields_form),
    images: dict[str, ImageUpload] = Depends(image_uploads_form),
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    """
    Create a product.

    - **image1**: Primary image (required, jpeg/png)
    - **image2..image5**: Additional images (optional)

    The slug is derived from the name and never changes afterwards.
    """
    result = service.create(fields, images)
    return send_result(result, "Product created successfully.", status.HTTP_201_CREATED)


@router.api_route(
    "/{product_id}",
    methods=["PUT", "PATCH"],
    summary="Update a product",
    description="Replace every scalar field; resubmitted images replace the stored ones."
)
def update_product(
    product_id: int,
    fields: ProductFields = Depends(product_fields_form),
    images: dict[str, ImageUpload] = Depends(image_uploads_form),
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.update(product_id, fields, images)
    return send_result(result, "Product updated successfully.")


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product and all of its images."
)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.delete(product_id)
    return send_result(result, "Product deleted successfully", status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/price", summary="Update product price")
def update_price(
    product_id: int,
    payload: PriceUpdate,
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.update_price(product_id, payload.price)
    return send_result(result, "Product price updated successfully.")


@router.patch("/{product_id}/stock", summary="Update product stock")
def update_stock(
    product_id: int,
    payload: StockUpdate,
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.update_stock(product_id, payload.stock)
    return send_result(result, "Product stock updated successfully.")


@router.patch("/{product_id}/group", summary="Assign product group")
def assign_group(
    product_id: int,
    payload: GroupUpdate,
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.assign_group(product_id, payload.product_group_id)
    return send_result(result, "Product group assigned successfully.")


@router.patch("/{product_id}/status", summary="Set product status")
def set_status(
    product_id: int,
    payload: StatusUpdate,
    service: ProductService = Depends(get_product_service),
    admin: Admin = Depends(get_current_admin),
):
    result = service.set_status(product_id, payload.status)
    return send_result(result, "Product status updated successfully")
