"""HTTP utilities public API (barrel module).

This package provides:
- Response categories and the error/retry handler table
- The provider error body parser and Retry-After parsing
- The EC2 HTTP client that applies the handler table
- The request signer seam and request timestamp helper

Recommended import pattern for consumers:
    from ec2_runtime.utils.http import EC2HttpClient, bind_handlers
"""

from .client import EC2HttpClient
from .handlers import (
    AWSClientErrorRetryHandler,
    AWSRedirectionRetryHandler,
    HandlerBinding,
    ParseAWSErrorFromXmlContent,
    ResponseCategory,
    RetryDecision,
    bind_handlers,
    parse_aws_error,
    parse_retry_after,
)
from .signing import RequestSigner, expiration_timestamp

__all__ = [
    "AWSClientErrorRetryHandler",
    "AWSRedirectionRetryHandler",
    "EC2HttpClient",
    "HandlerBinding",
    "ParseAWSErrorFromXmlContent",
    "RequestSigner",
    "ResponseCategory",
    "RetryDecision",
    "bind_handlers",
    "expiration_timestamp",
    "parse_aws_error",
    "parse_retry_after",
]
