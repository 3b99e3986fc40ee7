"""Bounded polling of readiness predicates.

Operations that mutate cloud state return before the state change has
settled. This module turns a boolean state check into a bounded retry
loop so a caller can block until the desired state is observed.

The loop evaluates the predicate immediately, then sleeps the policy
interval between attempts. Exhausting the attempt budget is reported
as ``False`` rather than raised, and an exception raised by the
predicate itself aborts the poll at once.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Literal, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TimeUnit = Literal["seconds", "milliseconds"]

_UNIT_SECONDS = {"seconds": 1.0, "milliseconds": 0.001}


@dataclass(frozen=True)
class PollPolicy:
    """Attempt budget and spacing for one readiness condition.

    :param max_attempts: Maximum number of predicate evaluations
    :param interval: Pause between two evaluations, in ``unit``
    :param unit: Unit of ``interval``
    :param name: Label used in log messages
    """

    max_attempts: int
    interval: float
    unit: TimeUnit = "seconds"
    name: str = "poll"

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if self.unit not in _UNIT_SECONDS:
            raise ValueError(f"unsupported unit {self.unit!r}")

    @property
    def interval_seconds(self) -> float:
        """Interval converted to seconds."""
        return self.interval * _UNIT_SECONDS[self.unit]

    @property
    def budget_seconds(self) -> float:
        """Overall wait budget, attempt count times interval, in seconds."""
        return self.max_attempts * self.interval_seconds

    @classmethod
    def within(
        cls, budget: float, interval: float, unit: TimeUnit = "seconds", name: str = "poll"
    ) -> "PollPolicy":
        """Build a policy whose attempts times interval fills ``budget``.

        :param budget: Overall wait budget, in ``unit``
        :param interval: Pause between two evaluations, in ``unit``
        :param unit: Unit of both ``budget`` and ``interval``
        :param name: Label used in log messages
        :return: Policy with ``max_attempts = budget // interval`` (at least 1)

        Example:
            >>> PollPolicy.within(20000, 500, "milliseconds").max_attempts
            40
        """
        if interval <= 0:
            raise ValueError("interval must be > 0 to derive an attempt count")
        return cls(
            max_attempts=max(1, int(budget // interval)),
            interval=interval,
            unit=unit,
            name=name,
        )


# Named policies, one per condition. Settle times differ by orders of
# magnitude between provider operations, so each is tuned separately.
RUNNING_POLICY = PollPolicy(max_attempts=3, interval=600, unit="seconds", name="running")
TERMINATED_POLICY = PollPolicy.within(20000, 500, unit="milliseconds", name="terminated")
SOCKET_OPEN_POLICY = PollPolicy(
    max_attempts=130, interval=1, unit="seconds", name="socket-open"
)


def wait_for(
    predicate: Callable[[T], bool],
    value: T,
    policy: PollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Evaluate ``predicate(value)`` until it holds or the budget runs out.

    :param predicate: Readiness check, True once the desired state is reached
    :param value: Input handed to the predicate on every attempt
    :param policy: Attempt budget and spacing
    :param sleep: Blocking sleep function, injectable for tests
    :return: True on the first successful attempt, False when exhausted
    :raises Exception: Whatever the predicate raises, without further attempts
    """
    delay = policy.interval_seconds
    for attempt in range(1, policy.max_attempts + 1):
        if predicate(value):
            logger.debug(
                f"[{policy.name}] condition met for {value} on attempt "
                f"{attempt}/{policy.max_attempts}"
            )
            return True
        logger.debug(
            f"[{policy.name}] attempt {attempt}/{policy.max_attempts} not ready for {value}"
        )
        if attempt < policy.max_attempts:
            sleep(delay)

    logger.info(
        f"[{policy.name}] gave up on {value} after {policy.max_attempts} attempts "
        f"({policy.budget_seconds:.1f}s budget)"
    )
    return False


class RetryablePredicate(Generic[T]):
    """A readiness predicate bound to its poll policy.

    Calling the instance blocks the calling thread until the wrapped
    predicate holds or the policy is exhausted.

    .. example::
       >>> running = RetryablePredicate(InstanceStateRunning(client), RUNNING_POLICY)
       >>> if not running(instance):
       ...     raise RuntimeError("instance never reached running")
    """

    def __init__(
        self,
        predicate: Callable[[T], bool],
        policy: PollPolicy,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.predicate = predicate
        self.policy = policy
        self._sleep = sleep

    def __call__(self, value: T) -> bool:
        return wait_for(self.predicate, value, self.policy, sleep=self._sleep)

    def __repr__(self) -> str:
        return f"RetryablePredicate({self.predicate!r}, {self.policy!r})"
