import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.admin import Admin, PasswordResetToken, RevokedToken
from app.schemas.admin import AdminRegister, AdminResponse, ResetPasswordRequest, TokenResponse
from app.services.result import ErrorKind, ServiceResult
from app.utils.security import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    hash_secret,
    verify_secret,
)

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Token is invalid or expired"


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AdminService:
    """
    Service class for admin accounts: registration, token login/logout and
    password reset.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def register(self, data: AdminRegister) -> ServiceResult[AdminResponse]:
        email = data.email.lower()
        if self._find_by_email(email):
            return self._email_taken()

        admin = Admin(
            first_name=data.first_name,
            last_name=data.last_name,
            email=email,
            password=hash_secret(data.password),
        )
        self.db.add(admin)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return self._email_taken()
        self.db.refresh(admin)

        logger.info(f"Admin #{admin.id} registered")
        return ServiceResult.success(AdminResponse.model_validate(admin))

    def login(self, email: str, password: str) -> ServiceResult[TokenResponse]:
        admin = self._find_by_email(email.lower())
        if not admin or not verify_secret(password, admin.password):
            logger.info(f"Failed login attempt for {email}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, "Unauthorized")

        token = create_access_token(admin.id)
        return ServiceResult.success(
            TokenResponse(token=token, expires_in=self.settings.JWT_EXPIRE_MINUTES * 60)
        )

    def authenticate(self, token: str) -> ServiceResult[Admin]:
        """Resolve a bearer token to its admin, rejecting revoked tokens."""
        try:
            claims = decode_access_token(token)
            admin_id = int(claims["sub"])
            jti = claims["jti"]
        except (JWTError, KeyError, ValueError) as e:
            logger.warning(f"Rejected access token: {e}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)

        if self.db.get(RevokedToken, jti) is not None:
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)

        admin = self.db.get(Admin, admin_id)
        if admin is None:
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)
        return ServiceResult.success(admin)

    def logout(self, token: str) -> ServiceResult[None]:
        try:
            claims = decode_access_token(token)
        except JWTError:
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)

        jti = claims.get("jti")
        if jti and self.db.get(RevokedToken, jti) is None:
            expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
            self.db.add(RevokedToken(jti=jti, expires_at=expires_at))
            self.db.commit()
        self._purge_revoked()
        return ServiceResult.success(None)

    def forgot_password(self, email: str) -> ServiceResult[str]:
        """
        Create a reset token for `email` and return it in plain form.

        Only the bcrypt hash is stored; the caller hands the plain token to
        the mail job.
        """
        email = email.lower()
        if not self._find_by_email(email):
            return ServiceResult.failure(ErrorKind.REJECTED, "Unable to send password reset link.")

        token = generate_reset_token()
        record = self.db.get(PasswordResetToken, email)
        if record is None:
            record = PasswordResetToken(email=email)
            self.db.add(record)
        record.token = hash_secret(token)
        record.created_at = datetime.now(timezone.utc)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Error storing password reset token for {email}")
            return ServiceResult.failure(ErrorKind.INTERNAL, "Unable to send password reset link.")

        return ServiceResult.success(token)

    def reset_password(self, data: ResetPasswordRequest) -> ServiceResult[None]:
        email = data.email.lower()
        failure = ServiceResult.failure(ErrorKind.REJECTED, "Unable to reset password.")

        admin = self._find_by_email(email)
        record = self.db.get(PasswordResetToken, email)
        if admin is None or record is None:
            return failure

        expires_at = _as_utc(record.created_at) + timedelta(
            minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        if datetime.now(timezone.utc) > expires_at:
            self.db.delete(record)
            self.db.commit()
            return failure
        if not verify_secret(data.token, record.token):
            return failure

        admin.password = hash_secret(data.password)
        self.db.delete(record)
        self.db.commit()

        logger.info(f"Password reset for admin #{admin.id}")
        return ServiceResult.success(None)

    def _find_by_email(self, email: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.email == email).first()

    def _email_taken(self) -> ServiceResult:
        return ServiceResult.failure(
            ErrorKind.VALIDATION,
            "The given data was invalid.",
            {"email": ["The email has already been taken."]},
        )

    def _purge_revoked(self) -> None:
        """Drop revocations whose tokens have expired anyway."""
        now = datetime.now(timezone.utc)
        expired = [
            r for r in self.db.query(RevokedToken).all()
            if _as_utc(r.expires_at) < now
        ]
        for record in expired:
            self.db.delete(record)
        if expired:
            self.db.commit()
