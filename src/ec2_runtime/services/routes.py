"""Data-driven route table for the EC2 query actions.

A route says which verb, path and response parser an action uses. The
service clients look actions up here and hand them to ``invoke``, so
the way a request is physically dispatched stays in one place.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from .parsers import parse_availability_zones, parse_instances, parse_regions

logger = logging.getLogger(__name__)

EC2_API_VERSION = "2009-11-30"

Parser = Callable[[bytes, Optional[str]], Any]


@dataclass(frozen=True)
class Route:
    """How one query action maps onto an HTTP exchange."""

    action: str
    parser: Parser
    verb: str = "POST"
    path: str = "/"
    api_version: str = EC2_API_VERSION

    def form(self, params: Mapping[str, str]) -> Dict[str, str]:
        """Build the form body: action, version, then the action parameters."""
        body = {"Action": self.action, "Version": self.api_version}
        body.update(params)
        return body


ROUTES: Mapping[str, Route] = MappingProxyType(
    {
        "describe_regions": Route("DescribeRegions", parse_regions),
        "describe_availability_zones": Route(
            "DescribeAvailabilityZones", parse_availability_zones
        ),
        "describe_instances": Route("DescribeInstances", parse_instances),
    }
)


def indexed(prefix: str, values) -> Dict[str, str]:
    """Expand values into the query API's ``Prefix.N`` parameter form.

    Example:
        >>> indexed("InstanceId", ["i-1", "i-2"])
        {'InstanceId.1': 'i-1', 'InstanceId.2': 'i-2'}
    """
    return {f"{prefix}.{i}": str(v) for i, v in enumerate(values, start=1)}


def invoke(
    client: httpx.Client,
    endpoint: str,
    name: str,
    params: Optional[Mapping[str, str]] = None,
    region: Optional[str] = None,
) -> Any:
    """Dispatch the named route against an endpoint and parse the result.

    :param client: HTTP client, normally an ``EC2HttpClient``
    :param endpoint: Regional endpoint URI
    :param name: Key into ``ROUTES``
    :param params: Action parameters
    :param region: Region handed to the parser for attribution
    :return: Whatever the route's parser returns
    :raises KeyError: If ``name`` is not a known route
    :raises AWSResponseError: If the provider answers with a failure
    """
    route = ROUTES[name]
    url = endpoint.rstrip("/") + route.path
    logger.debug(f"{route.action} -> {url}")
    response = client.request(route.verb, url, data=route.form(params or {}))
    return route.parser(response.content, region)
