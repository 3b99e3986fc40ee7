"""Shared Pydantic models for the EC2 client runtime.

The models cover only what the runtime layer reads from the provider:
instance state for the readiness predicates, availability zones for the
zone mapper, sockets for reachability checks, and the error body of a
failed request.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InstanceState(str, Enum):
    """Lifecycle states reported for an EC2 instance."""

    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"


class RunningInstance(BaseModel):
    """An instance as last observed through DescribeInstances.

    :param instance_id: Instance identifier (``i-...``)
    :type instance_id: str
    :param region: Region the instance lives in
    :type region: str
    :param state: Last observed lifecycle state
    :type state: InstanceState
    :param availability_zone: Placement zone, if reported
    :type availability_zone: Optional[str]
    :param ip_address: Public address, if assigned
    :type ip_address: Optional[str]
    :param private_ip_address: Private address, if assigned
    :type private_ip_address: Optional[str]
    """

    instance_id: str
    region: str
    state: InstanceState
    availability_zone: Optional[str] = None
    image_id: Optional[str] = None
    instance_type: Optional[str] = None
    ip_address: Optional[str] = None
    private_ip_address: Optional[str] = None


class AvailabilityZoneInfo(BaseModel):
    """An availability zone and the region that owns it."""

    zone: str
    region: str
    state: str = "available"


class IPSocket(BaseModel):
    """Address and port pair checked for reachability."""

    model_config = ConfigDict(frozen=True)

    address: str
    port: int = Field(..., ge=1, le=65535)

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


class AWSError(BaseModel):
    """Error body returned by the provider for a failed request."""

    code: Optional[str] = None
    message: Optional[str] = None
    request_id: Optional[str] = None
    endpoint: Optional[str] = None
