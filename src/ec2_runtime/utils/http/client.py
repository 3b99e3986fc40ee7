"""HTTP client that routes every failed response through the handler table.

``EC2HttpClient`` extends ``httpx.Client`` so that all requests, whether
issued through ``request()``/``get()``/``post()`` or built by hand and
passed to ``send()``, share one interception point. There it signs the
request, sends it, and for any 3xx/4xx/5xx response asks the bound
retry handler whether to resend. When no resend is due the bound error
handler interprets the response and its typed error is raised.

Redirects are never followed by httpx itself; following them is the
redirection retry handler's decision.

Examples:
    >>> client = EC2HttpClient(handlers=bind_handlers(settings))
    >>> response = client.post("https://ec2.us-east-1.amazonaws.com/", data=params)
"""

import logging
import time
from typing import Callable, Mapping, Optional

import httpx

from ...config.settings import Settings
from .handlers import HandlerBinding, ResponseCategory, bind_handlers
from .signing import RequestSigner

logger = logging.getLogger(__name__)


class EC2HttpClient(httpx.Client):
    """Blocking HTTP client with category-based error and retry handling.

    :param handlers: Category to handler table, ``bind_handlers(settings)`` by default
    :type handlers: Optional[Mapping[ResponseCategory, HandlerBinding]]
    :param signer: Optional signer applied before every send, resends included
    :type signer: Optional[RequestSigner]
    :param settings: Settings for the default handler table and timeout
    :type settings: Optional[Settings]
    :param sleep: Blocking sleep used between resends
    :raises AWSResponseError: When a failed response is not resent
    """

    def __init__(
        self,
        *args,
        handlers: Optional[Mapping[ResponseCategory, HandlerBinding]] = None,
        signer: Optional[RequestSigner] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs,
    ):
        if settings is None:
            from ...config.settings import settings as default_settings

            settings = default_settings
        kwargs["follow_redirects"] = False
        kwargs.setdefault("timeout", settings.http_timeout)
        super().__init__(*args, **kwargs)
        self.handlers = handlers if handlers is not None else bind_handlers(settings)
        self.signer = signer
        self._sleep = sleep

    def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        """Send a request, resending or raising per the handler table.

        :param request: The HTTP request to send
        :type request: httpx.Request
        :param kwargs: Additional arguments for ``httpx.Client.send``
        :return: The first non-failure response
        :rtype: httpx.Response
        :raises AWSResponseError: Interpreted error of the final failed response
        """
        kwargs["follow_redirects"] = False
        attempt = 0
        while True:
            attempt += 1
            if self.signer is not None:
                request = self.signer.sign(request)

            logger.debug(f"=== SEND: {request.method} {request.url} (attempt {attempt})")
            response = super().send(request, **kwargs)

            category = ResponseCategory.of(response.status_code)
            if category is None:
                return response

            response.read()
            binding = self.handlers[category]
            decision = None
            if binding.retry_handler is not None:
                decision = binding.retry_handler.retry_request(request, response, attempt)

            if decision is None:
                response.close()
                error = binding.error_handler(request, response)
                logger.info(
                    f"{request.method} {request.url} failed: {category.value} "
                    f"{response.status_code} {error.aws_code or ''}".rstrip()
                )
                raise error

            response.close()
            if decision.delay > 0:
                self._sleep(decision.delay)
            request = decision.request
