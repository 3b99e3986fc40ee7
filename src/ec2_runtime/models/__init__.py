"""EC2 runtime models package."""

from .base_models import (
    AvailabilityZoneInfo,
    AWSError,
    InstanceState,
    IPSocket,
    RunningInstance,
)

__all__ = [
    "AvailabilityZoneInfo",
    "AWSError",
    "InstanceState",
    "IPSocket",
    "RunningInstance",
]
