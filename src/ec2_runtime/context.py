"""Top-level context that composes the runtime at process start.

``EC2Context`` owns every long-lived piece of the runtime and builds each
one lazily on first use: the handler table, the HTTP client, the service
clients, the region loader, the endpoint resolvers and the readiness
predicates. Nothing here is module-global; two contexts never share
state.

A context is single-use: after ``close()`` every call that needs the
HTTP client raises ``EC2RuntimeError`` with code ``CONTEXT_CLOSED``.

Examples:
    >>> with EC2Context() as ctx:
    ...     print(ctx.current_region)
    ...     if not ctx.instance_running(instance):
    ...         raise RuntimeError("instance did not start in time")
"""

import logging
import threading
import time
from functools import cached_property
from typing import Callable, Mapping, Optional

from .config.settings import Settings
from .exceptions import EC2RuntimeError
from .models import IPSocket, RunningInstance
from .predicates import (
    RUNNING_POLICY,
    SOCKET_OPEN_POLICY,
    TERMINATED_POLICY,
    InstanceStateRunning,
    InstanceStateTerminated,
    RetryablePredicate,
    SocketOpen,
)
from .services import AvailabilityZoneAndRegionClient, InstanceClient, RegionLoader
from .utils.http import (
    EC2HttpClient,
    HandlerBinding,
    RequestSigner,
    ResponseCategory,
    bind_handlers,
    expiration_timestamp,
)
from .utils.logging_setup import setup_logging
from .utils.once import OnceCell
from .utils.region_config import EndpointResolver, ServiceFamily

logger = logging.getLogger(__name__)

SignerFactory = Callable[[Callable[[], str]], RequestSigner]

# cached properties holding a reference to the HTTP client
_CLIENT_BOUND = (
    "zone_and_region_client",
    "instance_client",
    "region_loader",
    "instance_running",
    "instance_terminated",
)


class EC2Context:
    """Composition root of the EC2 client runtime.

    :param settings: Runtime settings, a fresh ``Settings()`` by default
    :type settings: Optional[Settings]
    :param http_client: Pre-built HTTP client; one is created when omitted
    :type http_client: Optional[EC2HttpClient]
    :param signer_factory: Builds the request signer from the timestamp provider
    :type signer_factory: Optional[SignerFactory]
    :param sleep: Blocking sleep shared by the poller and the HTTP client
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[EC2HttpClient] = None,
        signer_factory: Optional[SignerFactory] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or Settings()
        self._signer_factory = signer_factory
        self._sleep = sleep
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._closed = False
        self._lock = threading.Lock()
        self._ec2_resolver: OnceCell[EndpointResolver] = OnceCell(
            lambda: EndpointResolver(self.regions(), family=ServiceFamily.EC2.value),
            name="ec2 endpoint resolver",
        )

    @classmethod
    def bootstrap(cls, settings: Optional[Settings] = None, **kwargs) -> "EC2Context":
        """Configure logging from the settings and build a context.

        Intended for process start; library callers that manage logging
        themselves construct ``EC2Context`` directly.
        """
        settings = settings or Settings()
        setup_logging(level=settings.log_level)
        return cls(settings=settings, **kwargs)

    # -- configuration -------------------------------------------------

    def timestamp(self) -> str:
        """Request timestamp: now plus the configured expiry window."""
        return expiration_timestamp(self.settings.aws_expire_interval)

    @cached_property
    def handlers(self) -> Mapping[ResponseCategory, HandlerBinding]:
        """Response category to error/retry handler table."""
        return bind_handlers(self.settings)

    @property
    def http_client(self) -> EC2HttpClient:
        """HTTP client applying the handler table, created on first use."""
        if self._closed:
            raise EC2RuntimeError("EC2 context is closed", code="CONTEXT_CLOSED")
        if self._http_client is None:
            with self._lock:
                if self._http_client is None:
                    signer = None
                    if self._signer_factory is not None:
                        signer = self._signer_factory(self.timestamp)
                    self._http_client = EC2HttpClient(
                        handlers=self.handlers,
                        signer=signer,
                        settings=self.settings,
                        sleep=self._sleep,
                    )
        return self._http_client

    # -- services ------------------------------------------------------

    @cached_property
    def zone_and_region_client(self) -> AvailabilityZoneAndRegionClient:
        return AvailabilityZoneAndRegionClient(
            self.http_client,
            endpoint=self.settings.ec2_endpoint,
            endpoint_for=self.endpoint_for,
        )

    @cached_property
    def instance_client(self) -> InstanceClient:
        return InstanceClient(self.http_client, endpoint_for=self.endpoint_for)

    @cached_property
    def region_loader(self) -> RegionLoader:
        return RegionLoader(self.zone_and_region_client)

    # -- regions and endpoints ------------------------------------------

    def regions(self) -> Mapping[str, str]:
        """Region to EC2 endpoint mapping reported by the provider."""
        return self.region_loader.regions()

    def zone_to_region(self) -> Mapping[str, str]:
        """Availability zone to region mapping across all regions."""
        return self.region_loader.zone_to_region()

    @property
    def ec2_resolver(self) -> EndpointResolver:
        """Resolver over the provider-reported EC2 regions."""
        return self._ec2_resolver.get()

    @cached_property
    def elb_resolver(self) -> EndpointResolver:
        """Resolver over the fixed load balancing endpoints."""
        return EndpointResolver.for_family(ServiceFamily.ELB)

    def endpoint_for(self, region: str) -> str:
        """EC2 endpoint of a region."""
        return self.ec2_resolver.endpoint_for(region)

    def region_for(self, endpoint: str) -> str:
        """Region an EC2 endpoint belongs to."""
        return self.ec2_resolver.region_for(endpoint)

    @cached_property
    def current_region(self) -> str:
        """Region of the configured EC2 endpoint.

        :raises ConfigurationError: If the endpoint belongs to no reported region
        """
        region = self.region_for(self.settings.ec2_endpoint)
        logger.info(f"Current EC2 region is {region} ({self.settings.ec2_endpoint})")
        return region

    @cached_property
    def current_elb_region(self) -> str:
        """Region of the configured load balancing endpoint."""
        return self.elb_resolver.region_for(self.settings.elb_endpoint)

    # -- readiness -----------------------------------------------------

    @cached_property
    def instance_running(self) -> RetryablePredicate[RunningInstance]:
        """Blocks until an instance reports ``running``."""
        return RetryablePredicate(
            InstanceStateRunning(self.instance_client), RUNNING_POLICY, sleep=self._sleep
        )

    @cached_property
    def instance_terminated(self) -> RetryablePredicate[RunningInstance]:
        """Blocks until an instance reports ``terminated``."""
        return RetryablePredicate(
            InstanceStateTerminated(self.instance_client),
            TERMINATED_POLICY,
            sleep=self._sleep,
        )

    @cached_property
    def socket_open(self) -> RetryablePredicate[IPSocket]:
        """Blocks until a TCP socket accepts connections."""
        return RetryablePredicate(SocketOpen(), SOCKET_OPEN_POLICY, sleep=self._sleep)

    # -- lifecycle -----------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client if this context created it.

        Service clients and predicates bound to the client are dropped so
        later use fails on the closed context instead of inside httpx.
        """
        self._closed = True
        for name in _CLIENT_BOUND:
            self.__dict__.pop(name, None)
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
        self._http_client = None

    def __enter__(self) -> "EC2Context":
        return self

    def __exit__(self, *args) -> None:
        self.close()
