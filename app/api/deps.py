from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.admin import Admin
from app.services.admin_service import INVALID_TOKEN, AdminService
from app.services.product_service import ProductService
from app.utils.storage import BlobStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_blob_store() -> BlobStore:
    """Dependency returning the configured blob store."""
    return BlobStore()


def get_product_service(
    db: Session = Depends(get_db),
    storage: BlobStore = Depends(get_blob_store),
) -> ProductService:
    return ProductService(db, storage=storage)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Extract the bearer token, rejecting requests that carry none."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TOKEN,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_admin(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> Admin:
    """Dependency resolving the bearer token to an admin account."""
    result = AdminService(db).authenticate(token)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.value
