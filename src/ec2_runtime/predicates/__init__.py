"""Readiness predicates and the bounded poller that drives them."""

from .instance_state import InstanceStateRunning, InstanceStateTerminated
from .polling import (
    RUNNING_POLICY,
    SOCKET_OPEN_POLICY,
    TERMINATED_POLICY,
    PollPolicy,
    RetryablePredicate,
    wait_for,
)
from .socket_open import SocketOpen

__all__ = [
    "InstanceStateRunning",
    "InstanceStateTerminated",
    "PollPolicy",
    "RetryablePredicate",
    "RUNNING_POLICY",
    "SOCKET_OPEN_POLICY",
    "SocketOpen",
    "TERMINATED_POLICY",
    "wait_for",
]
