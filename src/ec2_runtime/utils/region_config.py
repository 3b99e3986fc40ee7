"""Centralized region configuration for the EC2 client runtime.

This module provides the fixed region to endpoint tables for each
service family and the resolver that maps regions to endpoints and
endpoints back to the region they belong to. The resolver also accepts
tables reported dynamically by the provider, such as the result of a
"describe regions" call.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Region:
    """Region identifiers known ahead of time."""

    US_EAST_1 = "us-east-1"
    US_WEST_1 = "us-west-1"
    EU_WEST_1 = "eu-west-1"
    AP_SOUTHEAST_1 = "ap-southeast-1"

    ALL = (US_EAST_1, US_WEST_1, EU_WEST_1, AP_SOUTHEAST_1)


class ServiceFamily(str, Enum):
    """Service families with independent region to endpoint tables."""

    EC2 = "ec2"
    ELB = "elb"


class RegionConfig:
    """Single source of truth for the fixed regional endpoints.

    Each service family owns exactly one endpoint per region. These
    tables are used when the provider is not asked for its region list,
    which is always the case for load balancing.
    """

    EC2_ENDPOINTS: Mapping[str, str] = MappingProxyType(
        {
            Region.US_EAST_1: "https://ec2.us-east-1.amazonaws.com",
            Region.US_WEST_1: "https://ec2.us-west-1.amazonaws.com",
            Region.EU_WEST_1: "https://ec2.eu-west-1.amazonaws.com",
            Region.AP_SOUTHEAST_1: "https://ec2.ap-southeast-1.amazonaws.com",
        }
    )

    ELB_ENDPOINTS: Mapping[str, str] = MappingProxyType(
        {
            Region.US_EAST_1: "https://elasticloadbalancing.us-east-1.amazonaws.com",
            Region.US_WEST_1: "https://elasticloadbalancing.us-west-1.amazonaws.com",
            Region.EU_WEST_1: "https://elasticloadbalancing.eu-west-1.amazonaws.com",
            Region.AP_SOUTHEAST_1: "https://elasticloadbalancing.ap-southeast-1.amazonaws.com",
        }
    )

    @classmethod
    def endpoints_for(cls, family: ServiceFamily) -> Mapping[str, str]:
        """Get the fixed region table of a service family.

        :param family: Service family
        :type family: ServiceFamily
        :return: Read-only region to endpoint mapping
        :rtype: Mapping[str, str]

        Example:
            >>> RegionConfig.endpoints_for(ServiceFamily.ELB)["eu-west-1"]
            'https://elasticloadbalancing.eu-west-1.amazonaws.com'
        """
        if family is ServiceFamily.ELB:
            return cls.ELB_ENDPOINTS
        return cls.EC2_ENDPOINTS

    @classmethod
    def is_valid_region(cls, region: str) -> bool:
        """Check if a region is one of the fixed known regions.

        :param region: Region identifier to validate
        :type region: str
        :return: True if known, False otherwise
        :rtype: bool
        """
        if not region:
            return False
        return region.lower() in Region.ALL


def normalize_endpoint(endpoint: str) -> str:
    """Normalise an endpoint URI for table lookups.

    Scheme and host are case-insensitive and a trailing slash carries
    no meaning, so ``HTTPS://EC2.us-east-1.amazonaws.com/`` and
    ``https://ec2.us-east-1.amazonaws.com`` compare equal.
    """
    endpoint = str(endpoint).strip().rstrip("/")
    scheme, sep, rest = endpoint.partition("://")
    if not sep:
        return endpoint
    host, slash, path = rest.partition("/")
    return f"{scheme.lower()}://{host.lower()}{slash}{path}"


class EndpointResolver:
    """Immutable bidirectional view of a region to endpoint table.

    The inverse table is built once in the constructor. A table that
    maps two regions to the same endpoint cannot be inverted and is
    rejected as a configuration fault.

    :param endpoints: Region to endpoint mapping
    :type endpoints: Mapping[str, str]
    :param family: Service family the table belongs to, for messages
    :type family: str
    :raises ConfigurationError: If two regions share an endpoint
    """

    def __init__(self, endpoints: Mapping[str, str], family: str = "ec2"):
        self.family = family
        table: Dict[str, str] = {}
        inverse: Dict[str, str] = {}
        for region, endpoint in endpoints.items():
            key = normalize_endpoint(endpoint)
            if key in inverse:
                raise ConfigurationError(
                    f"{family} endpoint {endpoint} is mapped to both "
                    f"{inverse[key]} and {region}",
                    setting=f"{family}_endpoint",
                )
            table[region] = str(endpoint).rstrip("/")
            inverse[key] = region
        self._endpoints = MappingProxyType(table)
        self._regions = MappingProxyType(inverse)

    @classmethod
    def for_family(cls, family: ServiceFamily) -> "EndpointResolver":
        """Build a resolver over the fixed table of a service family."""
        return cls(RegionConfig.endpoints_for(family), family=family.value)

    @property
    def endpoints(self) -> Mapping[str, str]:
        """Read-only region to endpoint mapping."""
        return self._endpoints

    def endpoint_for(self, region: str) -> str:
        """Get the endpoint serving a region.

        :param region: Region identifier
        :type region: str
        :return: Endpoint URI
        :rtype: str
        :raises ConfigurationError: If the region is not in the table
        """
        try:
            return self._endpoints[region]
        except KeyError:
            raise ConfigurationError(
                f"region {region} not in {self.family} regions {sorted(self._endpoints)}",
                setting=f"{self.family}_endpoint",
            ) from None

    def region_for(self, endpoint: str) -> str:
        """Get the region an endpoint belongs to.

        Every reachable endpoint must belong to exactly one configured
        region, so a miss is a broken invariant rather than a default.

        :param endpoint: Endpoint URI
        :type endpoint: str
        :return: Region identifier
        :rtype: str
        :raises ConfigurationError: If the endpoint is not in the table

        Example:
            >>> resolver = EndpointResolver.for_family(ServiceFamily.EC2)
            >>> resolver.region_for("https://ec2.us-west-1.amazonaws.com")
            'us-west-1'
        """
        region = self._regions.get(normalize_endpoint(endpoint))
        if region is None:
            logger.error(f"{endpoint} not in {self.family} regions {dict(self._regions)}")
            raise ConfigurationError(
                f"{endpoint} not in {self.family} regions {sorted(self._endpoints)}",
                setting=f"{self.family}_endpoint",
            )
        return region

    def __contains__(self, region: object) -> bool:
        return region in self._endpoints

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self) -> str:
        return f"EndpointResolver(family={self.family!r}, regions={list(self._endpoints)})"
