from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class Admin(Base):
    """
    Administrator account allowed to manage the catalog.

    The `password` column holds a bcrypt hash, never the plain password.
    """
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Admin(id={self.id}, email='{self.email}')>"


class PasswordResetToken(Base):
    """Pending password reset for an email. Only the token hash is stored."""
    __tablename__ = "password_reset_tokens"

    email = Column(String(255), primary_key=True)
    token = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class RevokedToken(Base):
    """Access token invalidated by logout, kept until it would have expired."""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
