# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Poll-until-terminal-state primitive shared by every wait in the tool."""

import threading
from dataclasses import dataclass
from enum import Enum
from loguru import logger
from typing import Callable, Generic, Optional, TypeVar


T = TypeVar('T')


class PollOutcome(str, Enum):
    """How a poll loop ended."""

    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    TIMED_OUT = 'timed_out'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class PollResult(Generic[T]):
    """Final state of a poll loop."""

    outcome: PollOutcome
    last_state: Optional[T]
    attempts: int

    @property
    def succeeded(self) -> bool:
        """True when the success predicate matched."""
        return self.outcome == PollOutcome.SUCCEEDED


def poll_until(
    check: Callable[[], T],
    is_success: Callable[[T], bool],
    is_failure: Callable[[T], bool],
    interval: float,
    max_attempts: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    description: str = 'operation',
) -> PollResult[T]:
    """Call ``check`` until its result is terminal.

    The first check runs immediately; ``interval`` seconds pass between
    checks. The wait is a ``cancel_event.wait`` so another thread can stop
    it early.

    Args:
        check: Returns the current state
        is_success: Terminal success predicate
        is_failure: Terminal failure predicate
        interval: Seconds between checks
        max_attempts: Maximum number of checks, None for no ceiling
        cancel_event: Event that cancels the wait when set
        description: Used in log messages

    Returns:
        PollResult with the outcome, the last observed state and the number of checks
    """
    cancel_event = cancel_event or threading.Event()
    attempt = 0
    state: Optional[T] = None

    while max_attempts is None or attempt < max_attempts:
        if cancel_event.is_set():
            logger.warning(f'Stopped waiting for {description}: cancelled')
            return PollResult(PollOutcome.CANCELLED, state, attempt)

        attempt += 1
        state = check()

        if is_success(state):
            logger.info(f'{description} reached {state} after {attempt} check(s)')
            return PollResult(PollOutcome.SUCCEEDED, state, attempt)
        if is_failure(state):
            logger.error(f'{description} reached {state} after {attempt} check(s)')
            return PollResult(PollOutcome.FAILED, state, attempt)

        if max_attempts is not None and attempt >= max_attempts:
            break

        ceiling = max_attempts if max_attempts is not None else 'unbounded'
        logger.info(
            f'{description} is {state or "unknown"}; attempt {attempt} of {ceiling}, '
            f'waiting {interval} seconds...'
        )
        if cancel_event.wait(interval):
            logger.warning(f'Stopped waiting for {description}: cancelled')
            return PollResult(PollOutcome.CANCELLED, state, attempt)

    logger.error(f'Timeout waiting for {description} after {attempt} check(s)')
    return PollResult(PollOutcome.TIMED_OUT, state, attempt)
