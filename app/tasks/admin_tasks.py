import logging
from urllib.parse import urlencode

import httpx

from app.config import get_settings
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def build_reset_link(email: str, token: str) -> str:
    settings = get_settings()
    return f"{settings.PASSWORD_RESET_URL}/{token}?{urlencode({'email': email})}"


@celery_app.task(bind=True, name="send_password_reset_email")
def send_password_reset_email(self, email: str, token: str) -> dict:
    """
    Deliver a password reset link to an admin.

    The message is posted to the HTTP mail provider configured by
    `EMAIL_API_URL`. Without a provider the link is only logged, which is
    enough for local development.

    Args:
        email: Recipient admin email
        token: Plain reset token

    Returns:
        Dictionary with the delivery result
    """
    settings = get_settings()
    link = build_reset_link(email, token)

    if not settings.EMAIL_API_URL:
        logger.info(f"No mail provider configured, reset link for {email}: {link}")
        return {"status": "logged", "email": email}

    payload = {
        "from": settings.EMAIL_FROM,
        "to": [email],
        "subject": "Reset your password",
        "text": (
            "You are receiving this email because we received a password reset "
            f"request for your account.\n\n{link}\n\n"
            f"This link will expire in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes."
        ),
    }
    headers = {"Authorization": f"Bearer {settings.EMAIL_API_KEY}"}

    try:
        response = httpx.post(
            settings.EMAIL_API_URL,
            json=payload,
            headers=headers,
            timeout=settings.EMAIL_HTTP_TIMEOUT,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Error sending password reset email to {email}: {e}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

    logger.info(f"Password reset email sent to {email}")
    return {"status": "sent", "email": email}
