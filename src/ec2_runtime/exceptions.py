"""Structured exception classes for the EC2 client runtime."""

import json
from typing import Any, Dict, Optional


class EC2RuntimeError(Exception):
    """Base exception for all EC2 runtime errors.

    This exception serves as the parent class for every error raised by
    the runtime layer, providing a consistent interface for error
    handling across endpoint resolution, region loading and HTTP
    failure interpretation.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ConfigurationError(EC2RuntimeError):
    """Raised when a configuration invariant is broken.

    Covers an endpoint that belongs to no configured region, an unknown
    region identifier, or a region table that maps two regions to the
    same endpoint. These are startup faults and are never retried.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class AWSResponseError(EC2RuntimeError):
    """Raised when the provider answers with a redirection, client or server error.

    Produced by the shared error interpretation handler from the response
    body. The AWS error code (``aws_code``) is kept separate from the
    runtime ``code`` so callers can branch on either.

    :param message: Description of the failure, usually the AWS message
    :param status_code: HTTP status code of the response
    :param category: Response category name (redirection/client_error/server_error)
    :param aws_code: Error code reported by the provider, if any
    :param request_id: Provider request id, if any
    :param url: URL of the failed request
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        category: Optional[str] = None,
        aws_code: Optional[str] = None,
        request_id: Optional[str] = None,
        url: Optional[str] = None,
    ):
        """Initialize response error with message and response details."""
        details: Dict[str, Any] = {}
        if status_code:
            details["status_code"] = status_code
        if category:
            details["category"] = category
        if aws_code:
            details["aws_code"] = aws_code
        if request_id:
            details["request_id"] = request_id
        if url:
            details["url"] = url
        super().__init__(message=message, code="AWS_RESPONSE_ERROR", details=details)
        self.status_code = status_code
        self.category = category
        self.aws_code = aws_code
        self.request_id = request_id
        self.url = url


class RateLimitError(AWSResponseError):
    """Raised when the provider throttles the caller.

    EC2 throttles with either a 4xx or a 503, so the category follows
    the status of the response that carried the throttling code.

    :param message: Description of the rate limit error
    :param category: Response category name, ``client_error`` by default
    :param retry_after: Optional seconds to wait before retrying
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        aws_code: Optional[str] = None,
        request_id: Optional[str] = None,
        url: Optional[str] = None,
        retry_after: Optional[float] = None,
        category: str = "client_error",
    ):
        """Initialize rate limit error with message and optional retry hint."""
        super().__init__(
            message=message,
            status_code=status_code,
            category=category,
            aws_code=aws_code,
            request_id=request_id,
            url=url,
        )
        self.code = "RATE_LIMIT_ERROR"
        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after


class RegionLookupError(EC2RuntimeError):
    """Raised when the authoritative region list cannot be fetched.

    The first failure is cached by the region loader and this same
    instance is re-raised to every later caller.

    :param message: Description of the lookup failure
    :param original_error: The exception raised by the remote call
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """Initialize region lookup error with the underlying cause."""
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="REGION_LOOKUP_ERROR", details=details)
        self.original_error = original_error
