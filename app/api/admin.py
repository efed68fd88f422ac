from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_bearer_token, get_current_admin
from app.database import get_db
from app.models.admin import Admin
from app.schemas.admin import (
    AdminLogin,
    AdminRegister,
    AdminResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from app.services.admin_service import AdminService
from app.tasks.admin_tasks import send_password_reset_email
from app.utils.responses import send_result, send_success

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new admin"
)
def register(data: AdminRegister, db: Session = Depends(get_db)):
    result = AdminService(db).register(data)
    return send_result(result, "Admin registered successfully", status.HTTP_201_CREATED)


@router.post("/login", summary="Log in and receive an access token")
def login(data: AdminLogin, db: Session = Depends(get_db)):
    result = AdminService(db).login(data.email, data.password)
    return send_result(result, "Login successful")


@router.get("/me", summary="Get the authenticated admin")
def me(admin: Admin = Depends(get_current_admin)):
    return send_success("Admin retrieved successfully", AdminResponse.model_validate(admin))


@router.post("/logout", summary="Revoke the current access token")
def logout(
    token: str = Depends(get_bearer_token),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    result = AdminService(db).logout(token)
    return send_result(result, "Successfully logged out")


@router.post(
    "/forgot-password",
    summary="Send a password reset link",
    description="Creates a reset token and queues the reset email in the background."
)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    result = AdminService(db).forgot_password(data.email)
    if not result.ok:
        return send_result(result, "")

    send_password_reset_email.delay(data.email.lower(), result.value)
    return send_success("Password reset link sent successfully.")


@router.post("/reset-password", summary="Reset password with a reset token")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    result = AdminService(db).reset_password(data)
    return send_result(result, "Password has been successfully reset.")


@router.get("/reset-password/{token}", summary="Show the reset form token")
def show_reset_form(token: str):
    return send_success("Please provide your new password.", {"token": token})
