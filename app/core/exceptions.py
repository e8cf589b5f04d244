from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Standardized error codes for the API."""
    # Validation errors (2xxx)
    INVALID_INPUT = "VAL_2001"
    INVALID_PACKAGE = "VAL_2002"
    INVALID_SIGNATURE = "VAL_2003"

    # Resource errors (3xxx)
    SESSION_NOT_FOUND = "RES_3001"

    # External service errors (5xxx)
    PAYMENT_ERROR = "EXT_5003"
    EMAIL_ERROR = "EXT_5004"
    STORE_ERROR = "EXT_5005"

    # System errors (9xxx)
    INTERNAL_ERROR = "SYS_9001"


class APIException(HTTPException):
    """Base exception class for API errors with standardized error codes."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.details = details
        super().__init__(status_code=status_code, detail=message)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationException(APIException):
    """Exception for malformed request bodies."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidPackageException(APIException):
    """Raised when a caller asks for a package the catalog does not know."""

    def __init__(self, package_id: Optional[str]):
        self.package_id = package_id
        super().__init__(
            error_code=ErrorCode.INVALID_PACKAGE,
            message="Invalid package",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"package": package_id}
        )


class SignatureInvalidException(APIException):
    """Raised when a webhook payload fails signature verification."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(
            error_code=ErrorCode.INVALID_SIGNATURE,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST
        )


class PaymentProviderException(APIException):
    """Upstream payment processor fault; the provider's message is passed through."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.PAYMENT_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class SessionNotFoundException(APIException):
    """Raised when the payment processor has no session with the given id."""

    def __init__(self, session_id: str, message: Optional[str] = None):
        self.session_id = session_id
        super().__init__(
            error_code=ErrorCode.SESSION_NOT_FOUND,
            message=message or f"No such checkout session: {session_id}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"session_id": session_id}
        )


class EmailDeliveryException(APIException):
    """Email provider rejected the request; carries the provider's response text verbatim.

    Attributes:
        provider_status: HTTP status returned by the provider, if any
    """

    def __init__(self, message: str, provider_status: Optional[int] = None):
        self.provider_status = provider_status
        super().__init__(
            error_code=ErrorCode.EMAIL_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"provider_status": provider_status} if provider_status is not None else None
        )
