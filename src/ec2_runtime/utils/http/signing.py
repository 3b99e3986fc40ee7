"""Request signing seam and the request timestamp it consumes.

The signing algorithm itself lives outside this package. The runtime
only defines the shape of a signer and computes the freshness window
the signer stamps on each request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import httpx

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class RequestSigner(Protocol):
    """Signs an outgoing request, returning the request to send."""

    def sign(self, request: httpx.Request) -> httpx.Request: ...


def expiration_timestamp(expire_interval: int, now: Optional[datetime] = None) -> str:
    """Format ``now + expire_interval`` seconds as an ISO-8601 UTC timestamp.

    :param expire_interval: Freshness window in seconds
    :type expire_interval: int
    :param now: Reference time, the current UTC time by default
    :type now: Optional[datetime]
    :return: Timestamp such as ``2010-01-01T00:00:30Z``
    :rtype: str
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return (now + timedelta(seconds=expire_interval)).strftime(ISO8601_FORMAT)
