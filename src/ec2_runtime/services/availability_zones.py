"""Availability zone and region queries."""

import logging
from typing import Callable, Dict, List

import httpx

from ..models import AvailabilityZoneInfo
from .routes import indexed, invoke

logger = logging.getLogger(__name__)


class AvailabilityZoneAndRegionClient:
    """Blocking client for DescribeRegions and DescribeAvailabilityZones.

    :param http_client: Client used for dispatch, normally an ``EC2HttpClient``
    :param endpoint: Endpoint asked for the region list
    :param endpoint_for: Resolves a region to its endpoint for per-region calls
    """

    def __init__(
        self,
        http_client: httpx.Client,
        endpoint: str,
        endpoint_for: Callable[[str], str],
    ):
        self.http_client = http_client
        self.endpoint = endpoint
        self.endpoint_for = endpoint_for

    def describe_regions(self, *region_names: str) -> Dict[str, str]:
        """Fetch the region to endpoint mapping, optionally for named regions only."""
        return invoke(
            self.http_client,
            self.endpoint,
            "describe_regions",
            indexed("RegionName", region_names),
        )

    def describe_availability_zones_in_region(
        self, region: str, *zone_names: str
    ) -> List[AvailabilityZoneInfo]:
        """Fetch the availability zones of one region."""
        return invoke(
            self.http_client,
            self.endpoint_for(region),
            "describe_availability_zones",
            indexed("ZoneName", zone_names),
            region=region,
        )
