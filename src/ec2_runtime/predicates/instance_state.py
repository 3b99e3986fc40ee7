"""Readiness predicates over EC2 instance state.

Each predicate re-describes the instance in its region and compares the
fresh state with its target. A failing describe call propagates to the
poller, which aborts instead of retrying.
"""

import logging
from typing import List, Optional, Protocol

from ..exceptions import EC2RuntimeError
from ..models import InstanceState, RunningInstance

logger = logging.getLogger(__name__)


class InstanceDescriber(Protocol):
    """The status query the instance predicates depend on."""

    def describe_instances_in_region(
        self, region: str, *instance_ids: str
    ) -> List[RunningInstance]: ...


class _InstanceStateIs:
    target: InstanceState

    def __init__(self, client: InstanceDescriber):
        self.client = client

    def refresh(self, instance: RunningInstance) -> Optional[RunningInstance]:
        found = self.client.describe_instances_in_region(
            instance.region, instance.instance_id
        )
        for candidate in found:
            if candidate.instance_id == instance.instance_id:
                return candidate
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class InstanceStateRunning(_InstanceStateIs):
    """True once the instance reports ``running``."""

    target = InstanceState.RUNNING

    def __call__(self, instance: RunningInstance) -> bool:
        current = self.refresh(instance)
        if current is None:
            raise EC2RuntimeError(
                f"instance {instance.instance_id} not found in {instance.region}",
                code="INSTANCE_NOT_FOUND",
                details={"instance_id": instance.instance_id, "region": instance.region},
            )
        logger.debug(
            f"{current.instance_id}: looking for state running, "
            f"currently {current.state.value}"
        )
        return current.state == self.target


class InstanceStateTerminated(_InstanceStateIs):
    """True once the instance reports ``terminated`` or is no longer listed."""

    target = InstanceState.TERMINATED

    def __call__(self, instance: RunningInstance) -> bool:
        current = self.refresh(instance)
        if current is None:
            logger.debug(f"{instance.instance_id}: no longer listed, treating as terminated")
            return True
        logger.debug(
            f"{current.instance_id}: looking for state terminated, "
            f"currently {current.state.value}"
        )
        return current.state == self.target
