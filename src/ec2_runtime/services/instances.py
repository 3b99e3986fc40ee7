"""Instance status queries used by the readiness predicates."""

from typing import Callable, List

import httpx

from ..models import RunningInstance
from .routes import indexed, invoke


class InstanceClient:
    """Blocking client for DescribeInstances.

    :param http_client: Client used for dispatch, normally an ``EC2HttpClient``
    :param endpoint_for: Resolves a region to its endpoint
    """

    def __init__(self, http_client: httpx.Client, endpoint_for: Callable[[str], str]):
        self.http_client = http_client
        self.endpoint_for = endpoint_for

    def describe_instances_in_region(
        self, region: str, *instance_ids: str
    ) -> List[RunningInstance]:
        """Describe instances in a region, all of them when no id is given."""
        return invoke(
            self.http_client,
            self.endpoint_for(region),
            "describe_instances",
            indexed("InstanceId", instance_ids),
            region=region,
        )
