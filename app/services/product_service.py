import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.product import IMAGE_FIELDS, Category, Color, Product
from app.schemas.product import ImageUpload, ProductFields, ProductResponse
from app.services.result import ErrorKind, ServiceResult
from app.services.slug_service import SlugAllocator
from app.utils.cache import CacheService, cache_service
from app.utils.storage import BlobStore

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for product catalog operations.

    This service handles:
    - Slug allocation for new products
    - Image lifecycle (store new, replace old, remove orphaned)
    - Creating, updating and deleting products
    - Narrow updates of price, stock, group and status
    - Cached reads by ID

    Blob and row writes are not transactional. Operations are ordered so a
    row never references a deleted blob: new blobs are written first, the
    row is committed, and replaced blobs are removed only after the commit.
    """

    CACHE_PREFIX = "product"

    def __init__(
        self,
        db: Session,
        storage: Optional[BlobStore] = None,
        cache: Optional[CacheService] = None,
        require_image1_on_update: Optional[bool] = None,
    ):
        settings = get_settings()
        self.db = db
        self.storage = storage or BlobStore()
        self.cache = cache or cache_service
        self.slugs = SlugAllocator(db)
        self.disk = settings.PUBLIC_DISK
        self.image_dir = settings.PRODUCT_IMAGE_DIR
        if require_image1_on_update is None:
            require_image1_on_update = settings.REQUIRE_IMAGE1_ON_UPDATE
        self.require_image1_on_update = require_image1_on_update

    # Reads

    def list_all(self) -> ServiceResult[list[ProductResponse]]:
        products = self.db.query(Product).order_by(Product.id).all()
        return ServiceResult.success([ProductResponse.model_validate(p) for p in products])

    def get_by_id(self, product_id: int) -> ServiceResult[ProductResponse]:
        """
        Get a product by ID.

        Checks the Redis cache first, then falls back to the database and
        caches the result.
        """
        cached = self.cache.get(self.CACHE_PREFIX, str(product_id))
        if cached:
            return ServiceResult.success(ProductResponse.model_validate(cached))

        product = self._get(product_id)
        if not product:
            return self._not_found(product_id)

        data = ProductResponse.model_validate(product)
        self.cache.set(self.CACHE_PREFIX, str(product_id), data.model_dump(mode="json"))
        return ServiceResult.success(data)

    def get_by_slug(self, slug: str) -> ServiceResult[ProductResponse]:
        product = self.db.query(Product).filter(Product.slug == slug).first()
        if not product:
            return ServiceResult.failure(
                ErrorKind.NOT_FOUND, f"Product with slug '{slug}' not found"
            )
        return ServiceResult.success(ProductResponse.model_validate(product))

    def list_by_group(self, group_id: int) -> ServiceResult[list[ProductResponse]]:
        products = (
            self.db.query(Product)
            .filter(Product.product_group_id == group_id)
            .order_by(Product.id)
            .all()
        )
        return ServiceResult.success([ProductResponse.model_validate(p) for p in products])

    # Writes

    def create(
        self,
        fields: ProductFields,
        images: dict[str, ImageUpload],
    ) -> ServiceResult[ProductResponse]:
        """
        Create a product with up to five images.

        Args:
            fields: Validated scalar fields
            images: Uploads keyed by slot name (`image1`..`image5`);
                `image1` is required

        Returns:
            Result holding the created product, or a VALIDATION, CONFLICT
            or INTERNAL error. Nothing is written when validation fails.
        """
        if "image1" not in images:
            return ServiceResult.failure(
                ErrorKind.VALIDATION,
                "The given data was invalid.",
                {"image1": ["The image1 field is required."]},
            )

        invalid = self._check_references(fields)
        if invalid:
            return invalid

        slug = self.slugs.allocate(fields.name)
        if not slug:
            return ServiceResult.failure(
                ErrorKind.VALIDATION,
                "The given data was invalid.",
                {"name": ["The name must contain at least one letter or digit."]},
            )

        data = fields.model_dump()
        written = []
        try:
            for slot, upload in self._ordered(images):
                path = self._store_image(slug, slot, upload)
                written.append(path)
                data[slot] = path

            product = Product(slug=slug, **data)
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except IntegrityError:
            self.db.rollback()
            self._discard(written)
            if self.slugs.exists(slug):
                logger.warning(f"Slug '{slug}' was taken by a concurrent request")
                return ServiceResult.failure(
                    ErrorKind.CONFLICT,
                    f"Slug '{slug}' was taken by a concurrent request, please retry",
                )
            logger.exception(f"Integrity error creating product with slug '{slug}'")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to create product")
        except (OSError, SQLAlchemyError):
            self.db.rollback()
            self._discard(written)
            logger.exception(f"Error creating product with slug '{slug}'")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to create product")

        logger.info(f"Product #{product.id} created with slug '{slug}' and {len(written)} image(s)")
        return ServiceResult.success(ProductResponse.model_validate(product))

    def update(
        self,
        product_id: int,
        fields: ProductFields,
        images: dict[str, ImageUpload],
    ) -> ServiceResult[ProductResponse]:
        """
        Replace a product's fields and any resubmitted images.

        Every scalar field is overwritten. Image slots without a new upload
        keep their stored path. The slug is never recomputed.
        """
        product = self._get(product_id)
        if not product:
            return self._not_found(product_id)

        if self.require_image1_on_update and "image1" not in images:
            return ServiceResult.failure(
                ErrorKind.VALIDATION,
                "The given data was invalid.",
                {"image1": ["The image1 field is required."]},
            )

        invalid = self._check_references(fields)
        if invalid:
            return invalid

        previous = product.image_paths()
        data = fields.model_dump()
        written = []
        replaced = []
        try:
            for slot, upload in self._ordered(images):
                path = self._store_image(product.slug, slot, upload)
                data[slot] = path
                old_path = previous.get(slot)
                if old_path != path:
                    written.append(path)
                    if old_path:
                        replaced.append(old_path)

            for field, value in data.items():
                setattr(product, field, value)
            self.db.commit()
            self.db.refresh(product)
        except (OSError, SQLAlchemyError):
            self.db.rollback()
            # Prior blobs stay in place; only drop the new, unreferenced ones
            self._discard(written)
            logger.exception(f"Error updating product #{product_id}")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to update product")

        self._discard(replaced)
        self._invalidate_cache(product_id)

        logger.info(f"Product #{product_id} updated ({len(images)} image(s) replaced)")
        return ServiceResult.success(ProductResponse.model_validate(product))

    def delete(self, product_id: int) -> ServiceResult[None]:
        """
        Delete a product and every image it owns.

        The row is removed first; image deletion is then attempted for each
        slot independently.
        """
        product = self._get(product_id)
        if not product:
            return self._not_found(product_id)

        paths = list(product.image_paths().values())
        try:
            self.db.delete(product)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error deleting product #{product_id}")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to delete product")

        self._discard(paths)
        self._invalidate_cache(product_id)

        logger.info(f"Product #{product_id} deleted with {len(paths)} image(s)")
        return ServiceResult.success(None)

    def update_price(self, product_id: int, price: float) -> ServiceResult[ProductResponse]:
        return self._update_field(product_id, "price", price)

    def update_stock(self, product_id: int, stock: int) -> ServiceResult[ProductResponse]:
        return self._update_field(product_id, "stock", stock)

    def assign_group(self, product_id: int, group_id: int) -> ServiceResult[ProductResponse]:
        return self._update_field(product_id, "product_group_id", group_id)

    def set_status(self, product_id: int, active: bool) -> ServiceResult[ProductResponse]:
        return self._update_field(product_id, "status", active)

    # Helpers

    def _get(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def _not_found(self, product_id: int) -> ServiceResult:
        return ServiceResult.failure(
            ErrorKind.NOT_FOUND, f"Product with ID {product_id} not found"
        )

    def _update_field(self, product_id: int, field: str, value) -> ServiceResult[ProductResponse]:
        product = self._get(product_id)
        if not product:
            return self._not_found(product_id)

        setattr(product, field, value)
        try:
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error updating {field} of product #{product_id}")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to update product")

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} {field} set to {value!r}")
        return ServiceResult.success(ProductResponse.model_validate(product))

    def _check_references(self, fields: ProductFields) -> Optional[ServiceResult]:
        """Return a VALIDATION failure if the category or color does not exist."""
        errors = {}
        if self.db.get(Category, fields.category_id) is None:
            errors["category_id"] = ["The selected category id is invalid."]
        if self.db.get(Color, fields.color_id) is None:
            errors["color_id"] = ["The selected color id is invalid."]
        if errors:
            return ServiceResult.failure(ErrorKind.VALIDATION, "The given data was invalid.", errors)
        return None

    @staticmethod
    def _ordered(images: dict[str, ImageUpload]):
        return [(slot, images[slot]) for slot in IMAGE_FIELDS if slot in images]

    def _store_image(self, slug: str, slot: str, upload: ImageUpload) -> str:
        path = f"{self.image_dir}/{slug}-{slot}.{upload.extension}"
        return self.storage.put(self.disk, path, upload.content)

    def _discard(self, paths: Iterable[str]) -> None:
        """Delete blobs one by one; a failure is logged and the rest still run."""
        for path in paths:
            try:
                self.storage.delete(self.disk, path)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not delete blob {self.disk}:{path}: {e}")

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        self.cache.delete(self.CACHE_PREFIX, str(product_id))
