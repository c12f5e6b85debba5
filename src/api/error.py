from fastapi import status

from src.app import errors
from src.core.result import Error

STATUS_BY_CODE = {
    errors.INVALID_PARAMETERS: status.HTTP_400_BAD_REQUEST,
    errors.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    errors.EXPIRED_TOKEN: status.HTTP_410_GONE,
    errors.TOO_MANY_REQUESTS: status.HTTP_429_TOO_MANY_REQUESTS,
    errors.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    errors.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    errors.EMAIL_NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    errors.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    errors.LOGIN_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    errors.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def raise_for_error(error: Error):
    """Raise the HTTP exception matching a taxonomy error"""
    status_code = STATUS_BY_CODE.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


def error_body(status_code: int, error: Error) -> dict:
    body = {"code": status_code, "msg": error.message}
    if error.alerts:
        body["alerts"] = list(error.alerts)
    return body
