"""Unit tests for the instance state and socket readiness predicates."""

import socket
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from ec2_runtime.exceptions import AWSResponseError, EC2RuntimeError
from ec2_runtime.models import InstanceState, IPSocket, RunningInstance
from ec2_runtime.predicates import (
    InstanceStateRunning,
    InstanceStateTerminated,
    PollPolicy,
    RetryablePredicate,
    SocketOpen,
)


def instance(state=InstanceState.PENDING, instance_id="i-1"):
    return RunningInstance(instance_id=instance_id, region="us-east-1", state=state)


def describer(*states):
    """Instance client reporting the given states on successive calls."""
    client = MagicMock()
    client.describe_instances_in_region.side_effect = [
        [instance(state)] if state is not None else [] for state in states
    ]
    return client


@pytest.mark.unit
class TestInstanceStateRunning:
    """Test the running predicate."""

    def test_running(self):
        client = describer(InstanceState.RUNNING)
        assert InstanceStateRunning(client)(instance()) is True
        client.describe_instances_in_region.assert_called_once_with("us-east-1", "i-1")

    def test_pending(self):
        assert InstanceStateRunning(describer(InstanceState.PENDING))(instance()) is False

    def test_missing_instance_raises(self):
        with pytest.raises(EC2RuntimeError) as exc_info:
            InstanceStateRunning(describer(None))(instance())
        assert exc_info.value.code == "INSTANCE_NOT_FOUND"

    def test_ignores_other_instances(self):
        client = MagicMock()
        client.describe_instances_in_region.return_value = [
            instance(InstanceState.RUNNING, instance_id="i-other"),
            instance(InstanceState.PENDING),
        ]
        assert InstanceStateRunning(client)(instance()) is False

    def test_polled_until_running(self, sleeps, fake_sleep):
        client = describer(InstanceState.PENDING, InstanceState.PENDING, InstanceState.RUNNING)
        running = RetryablePredicate(
            InstanceStateRunning(client), PollPolicy(3, 600), sleep=fake_sleep
        )

        assert running(instance()) is True
        assert client.describe_instances_in_region.call_count == 3
        assert sleeps == [600, 600]

    def test_lookup_failure_aborts_poll(self, fake_sleep):
        client = MagicMock()
        client.describe_instances_in_region.side_effect = AWSResponseError(
            "Unavailable", status_code=503
        )
        running = RetryablePredicate(
            InstanceStateRunning(client), PollPolicy(3, 1), sleep=fake_sleep
        )

        with pytest.raises(AWSResponseError):
            running(instance())
        assert client.describe_instances_in_region.call_count == 1


@pytest.mark.unit
class TestInstanceStateTerminated:
    """Test the terminated predicate."""

    @pytest.mark.parametrize(
        "state,expected",
        [
            (InstanceState.TERMINATED, True),
            (InstanceState.SHUTTING_DOWN, False),
            (InstanceState.RUNNING, False),
        ],
    )
    def test_states(self, state, expected):
        assert InstanceStateTerminated(describer(state))(instance()) is expected

    def test_no_longer_listed_counts_as_terminated(self):
        assert InstanceStateTerminated(describer(None))(instance()) is True


@pytest.mark.unit
class TestSocketOpen:
    """Test the socket reachability predicate."""

    def test_connect_success_closes_connection(self):
        conn = MagicMock()
        connect = MagicMock(return_value=conn)
        predicate = SocketOpen(timeout=2.0, connect=connect)

        assert predicate(IPSocket(address="10.0.0.1", port=22)) is True
        connect.assert_called_once_with(("10.0.0.1", 22), timeout=2.0)
        conn.close.assert_called_once()

    @pytest.mark.parametrize(
        "error", [ConnectionRefusedError(), socket.timeout(), OSError("unreachable")]
    )
    def test_connect_failure_is_not_ready(self, error):
        predicate = SocketOpen(connect=MagicMock(side_effect=error))
        assert predicate(IPSocket(address="10.0.0.1", port=22)) is False

    def test_polled_until_open(self, sleeps, fake_sleep):
        connect = MagicMock(side_effect=[ConnectionRefusedError(), MagicMock()])
        socket_open = RetryablePredicate(
            SocketOpen(connect=connect), PollPolicy(130, 1), sleep=fake_sleep
        )

        assert socket_open(IPSocket(address="10.0.0.1", port=22)) is True
        assert sleeps == [1]


@pytest.mark.unit
class TestIPSocket:
    """Test the socket value type."""

    def test_str(self):
        assert str(IPSocket(address="10.0.0.1", port=8080)) == "10.0.0.1:8080"

    def test_port_range(self):
        with pytest.raises(ValidationError):
            IPSocket(address="10.0.0.1", port=0)

    def test_hashable(self):
        assert len({IPSocket(address="a", port=1), IPSocket(address="a", port=1)}) == 1
