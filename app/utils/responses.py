from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from app.services.result import ErrorKind, ServiceResult

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.REJECTED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def send_success(message: str, data: Any = None, status_code: int = status.HTTP_200_OK) -> Response:
    """Wrap a successful result in the `{message, data}` envelope."""
    if status_code == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "data": jsonable_encoder(data)},
    )


def send_error(message: str, status_code: int, details: Optional[dict] = None) -> JSONResponse:
    """Wrap a failure in the `{error}` envelope."""
    content = {"error": message}
    if details:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


def send_result(
    result: ServiceResult,
    message: str,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    """Translate a service result into the matching envelope and status."""
    if result.ok:
        return send_success(message, result.value, status_code)
    return send_error(result.message, ERROR_STATUS[result.error], result.details)
