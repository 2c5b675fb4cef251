"""
Stack lifecycle polling.
"""
import logging
import time
from typing import Callable, Iterable, Optional

from rosa_network.cloud.provider import CloudProvider
from rosa_network.errors import ProviderError, StackTimeoutError, ValidationError
from rosa_network.network.models import DEFAULT_TERMINAL_STATES, StackState, StackStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 1800.0


class StackLifecyclePoller:
    """Polls a stack until it reaches a terminal state.

    Poll failures are not retried: the provider's error propagates to the
    caller as soon as it happens.
    """

    def __init__(
        self,
        provider: CloudProvider,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize the poller.

        Args:
            provider: Cloud provider used to read stack status.
            interval: Seconds between polls.
            clock: Monotonic clock. Defaults to time.monotonic.
            sleep: Sleep function. Defaults to time.sleep.
        """
        if interval <= 0:
            raise ValidationError("poll interval must be positive")
        self.provider = provider
        self.interval = interval
        self.clock = clock or time.monotonic
        self.sleep = sleep or time.sleep
        self.logger = logging.getLogger(f"{__name__}.StackLifecyclePoller")

    def wait(
        self,
        stack_name: str,
        terminal_states: Optional[Iterable[StackStatus]] = None,
        timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> StackState:
        """Wait for a stack to reach one of the terminal states.

        Args:
            stack_name: Stack name or ID.
            terminal_states: States that end the wait. Defaults to every settled state
                plus ROLLBACK_IN_PROGRESS.
            timeout: Overall deadline in seconds.

        Returns:
            The stack state that ended the wait. Failure states carry the reasons
            reported by the provider.

        Raises:
            StackTimeoutError: If no terminal state is seen before the deadline.
            ProviderError: If reading the stack status fails.
        """
        terminal = frozenset(terminal_states) if terminal_states is not None else DEFAULT_TERMINAL_STATES
        deadline = self.clock() + timeout
        last_status = None

        while True:
            state = self.provider.describe_stack(stack_name)
            if state.status != last_status:
                self.logger.info(f"Stack {stack_name} status: {state.status.value}")
                last_status = state.status

            if state.status in terminal:
                if state.status.is_failure:
                    state.reasons = self.provider.get_stack_failure_reasons(stack_name)
                return state

            remaining = deadline - self.clock()
            if remaining <= 0:
                raise StackTimeoutError(
                    f"timed out after {timeout:g}s waiting for stack {stack_name}, "
                    f"last status {last_status.value}",
                    stack_name=stack_name,
                    last_status=last_status.value,
                )
            self.sleep(min(self.interval, remaining))


def ensure_created(state: StackState) -> StackState:
    """Raise ProviderError if a stack ended in a rollback or failure state."""
    if state.status.is_failure:
        reasons = "; ".join(state.reasons) if state.reasons else "no reason reported"
        raise ProviderError(f"Stack {state.stack_name} is in state {state.status.value}: {reasons}")
    return state
