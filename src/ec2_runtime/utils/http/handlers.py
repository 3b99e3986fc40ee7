"""Error interpretation and retry decisions per HTTP response category.

Every non-2xx response is classified as a redirection (3xx), a client
error (4xx) or a server error (5xx). Each category selects a pair of
handlers from a fixed table:

- an error handler that turns the response body into a typed
  ``AWSResponseError``; one handler serves all three categories since
  the provider uses a single error body format
- an optional retry handler that decides whether the request should be
  resent, and how. Server errors have none and surface directly.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

import httpx

from ...config.settings import Settings
from ...exceptions import AWSResponseError, RateLimitError
from ...models import AWSError

logger = logging.getLogger(__name__)

# Provider error codes that signal throttling
THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "RequestThrottled",
        "SlowDown",
    }
)

# Client error codes that are safe to resend unchanged
TRANSIENT_CODES = frozenset({"RequestTimeout", "OperationAborted"})

REDIRECT_STATUSES = frozenset({301, 302, 307, 308})

MAX_CLIENT_ERROR_DELAY = 20.0


class ResponseCategory(str, Enum):
    """HTTP failure categories that select an error/retry handler pair."""

    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"

    @classmethod
    def of(cls, status_code: int) -> Optional["ResponseCategory"]:
        """Classify a status code, None for anything that is not a failure."""
        if 300 <= status_code < 400:
            return cls.REDIRECTION
        if 400 <= status_code < 500:
            return cls.CLIENT_ERROR
        if 500 <= status_code < 600:
            return cls.SERVER_ERROR
        return None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_aws_error(content: bytes) -> Optional[AWSError]:
    """Parse a provider XML error body.

    Accepts both ``<Response><Errors><Error>...`` and a bare ``<Error>``
    document, with or without an XML namespace.

    :param content: Raw response body
    :type content: bytes
    :return: Parsed error, or None if the body is empty or not XML
    :rtype: Optional[AWSError]
    """
    if not content or not content.strip():
        return None
    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        return None

    fields = {}
    for element in root.iter():
        name = _local_name(element.tag)
        text = (element.text or "").strip()
        if not text:
            continue
        if name == "Code":
            fields.setdefault("code", text)
        elif name == "Message":
            fields.setdefault("message", text)
        elif name in ("RequestID", "RequestId"):
            fields.setdefault("request_id", text)
        elif name == "Endpoint":
            fields.setdefault("endpoint", text)
    if not fields:
        return None
    return AWSError(**fields)


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse Retry-After header from response.

    Supports both delta-seconds and HTTP-date formats.
    """
    retry_after = response.headers.get("retry-after", "").strip()
    if not retry_after:
        return None

    if retry_after.isdigit():
        return float(retry_after)

    try:
        retry_date = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse Retry-After header '{retry_after}': {e}")
        return None
    delay = (retry_date - datetime.now(retry_date.tzinfo)).total_seconds()
    return max(0.0, delay)


class ErrorHandler(Protocol):
    """Turns a failed response into a typed error."""

    def __call__(
        self, request: httpx.Request, response: httpx.Response
    ) -> AWSResponseError: ...


@dataclass(frozen=True)
class RetryDecision:
    """A request to resend, and how long to wait before sending it."""

    request: httpx.Request
    delay: float = 0.0


class RetryHandler(Protocol):
    """Decides whether a failed request should be resent."""

    def retry_request(
        self, request: httpx.Request, response: httpx.Response, attempt: int
    ) -> Optional[RetryDecision]: ...


class ParseAWSErrorFromXmlContent:
    """Shared error handler for every response category."""

    def __call__(
        self, request: httpx.Request, response: httpx.Response
    ) -> AWSResponseError:
        category = ResponseCategory.of(response.status_code)
        error = parse_aws_error(response.content)
        url = str(request.url)

        if error is None:
            message = f"{request.method} {url} failed with {response.status_code}"
            if response.reason_phrase:
                message += f" {response.reason_phrase}"
            return AWSResponseError(
                message,
                status_code=response.status_code,
                category=category.value if category else None,
                url=url,
            )

        message = error.message or error.code or f"HTTP {response.status_code}"
        if response.status_code == 429 or error.code in THROTTLING_CODES:
            return RateLimitError(
                message,
                status_code=response.status_code,
                aws_code=error.code,
                request_id=error.request_id,
                url=url,
                retry_after=parse_retry_after(response),
                category=category.value if category else "client_error",
            )
        return AWSResponseError(
            message,
            status_code=response.status_code,
            category=category.value if category else None,
            aws_code=error.code,
            request_id=error.request_id,
            url=url,
        )


def _copy_request(request: httpx.Request, url: httpx.URL) -> httpx.Request:
    headers = {
        k: v
        for k, v in request.headers.items()
        if k.lower() not in ("host", "content-length")
    }
    return httpx.Request(
        request.method,
        url,
        headers=headers,
        content=request.read(),
        extensions=dict(request.extensions),
    )


class AWSRedirectionRetryHandler:
    """Follows a provider redirect by resending to the new location.

    The target comes from the ``Location`` header or, for temporary
    redirects that carry no header, from the ``<Endpoint>`` element of
    the error body. A redirect back to the same URL is not followed.

    :param retry_limit: Maximum number of resends for one request
    """

    def __init__(self, retry_limit: int = 5):
        self.retry_limit = retry_limit

    def retry_request(
        self, request: httpx.Request, response: httpx.Response, attempt: int
    ) -> Optional[RetryDecision]:
        if response.status_code not in REDIRECT_STATUSES:
            return None
        if attempt > self.retry_limit:
            logger.warning(
                f"redirect limit {self.retry_limit} reached for {request.method} {request.url}"
            )
            return None

        target = self._target(request, response)
        if target is None or target == request.url:
            return None

        logger.info(f"redirecting {request.method} {request.url.host} -> {target.host}")
        return RetryDecision(_copy_request(request, target))

    @staticmethod
    def _target(request: httpx.Request, response: httpx.Response) -> Optional[httpx.URL]:
        location = response.headers.get("location")
        if location:
            return request.url.join(location)
        error = parse_aws_error(response.content)
        if error is not None and error.endpoint:
            return request.url.copy_with(host=error.endpoint)
        return None


class AWSClientErrorRetryHandler:
    """Resends client errors that signal throttling or a transient fault.

    Throttled requests wait for the ``Retry-After`` hint when the
    provider sends one; otherwise the delay doubles with every attempt
    starting at ``backoff``. Either way the delay is capped at
    ``MAX_CLIENT_ERROR_DELAY`` seconds.

    :param retry_limit: Maximum number of resends for one request
    :param backoff: Base delay in seconds
    """

    def __init__(self, retry_limit: int = 5, backoff: float = 0.5):
        self.retry_limit = retry_limit
        self.backoff = backoff

    def retry_request(
        self, request: httpx.Request, response: httpx.Response, attempt: int
    ) -> Optional[RetryDecision]:
        if attempt > self.retry_limit:
            return None

        error = parse_aws_error(response.content)
        code = error.code if error else None
        throttled = response.status_code == 429 or code in THROTTLING_CODES
        if not throttled and code not in TRANSIENT_CODES:
            return None

        delay = parse_retry_after(response) if throttled else None
        if delay is None:
            delay = self.backoff * (2 ** (attempt - 1))
        delay = min(delay, MAX_CLIENT_ERROR_DELAY)

        logger.warning(
            f"Retry {attempt}/{self.retry_limit} after {delay:.2f}s for "
            f"{request.method} {request.url} ({code or response.status_code})"
        )
        return RetryDecision(request, delay=delay)


@dataclass(frozen=True)
class HandlerBinding:
    """The error handler and optional retry handler of one category."""

    error_handler: ErrorHandler
    retry_handler: Optional[RetryHandler] = None


def bind_handlers(
    settings: Optional[Settings] = None,
) -> Mapping[ResponseCategory, HandlerBinding]:
    """Build the category to handler table.

    :param settings: Settings providing the retry budgets
    :type settings: Optional[Settings]
    :return: Read-only mapping covering all three categories
    :rtype: Mapping[ResponseCategory, HandlerBinding]
    """
    if settings is None:
        from ...config.settings import settings as default_settings

        settings = default_settings

    parse_error = ParseAWSErrorFromXmlContent()
    return MappingProxyType(
        {
            ResponseCategory.REDIRECTION: HandlerBinding(
                parse_error,
                AWSRedirectionRetryHandler(retry_limit=settings.redirect_retry_limit),
            ),
            ResponseCategory.CLIENT_ERROR: HandlerBinding(
                parse_error,
                AWSClientErrorRetryHandler(
                    retry_limit=settings.client_error_retry_limit,
                    backoff=settings.client_error_backoff_seconds,
                ),
            ),
            ResponseCategory.SERVER_ERROR: HandlerBinding(parse_error),
        }
    )
