"""
Bounded-time polling for eventual-consistency waits.

The cluster makes writes readable and durable asynchronously, so "wait for"
steps re-ask the same question every tick until the answer is right or the
time budget is spent. Running out of time fails the test.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from stepharness.errors import PollTimeoutError
from stepharness.models.steps import PollConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def wait_until(
    check: Callable[[], Awaitable[T]],
    *,
    description: str,
    poll: Optional[PollConfig] = None,
    is_done: Callable[[T], bool] = bool,
) -> T:
    """
    Call ``check`` until ``is_done`` accepts its result.

    The first check runs immediately; later checks run one tick apart. A
    single check that is still outstanding at the deadline is cancelled.
    Exceptions raised by ``check`` are not retried.

    Args:
        check: Side-effect free observation of the cluster.
        description: What is being waited for (used in logs and the failure).
        poll: Tick interval and total timeout; settings defaults if omitted.
        is_done: Predicate over the observed value. Defaults to truthiness.

    Returns:
        The first observed value accepted by ``is_done``.

    Raises:
        PollTimeoutError: The deadline passed first. Carries the last value
            observed (None if no check completed).
    """
    poll = poll or PollConfig()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + poll.timeout

    last_observed: Optional[T] = None
    attempt = 0

    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            break

        attempt += 1
        try:
            async with asyncio.timeout(remaining) as deadline_scope:
                last_observed = await check()
        except TimeoutError:
            # A TimeoutError raised by the check itself is a check failure.
            if not deadline_scope.expired():
                raise
            logger.warning(
                "Check for %s still pending at the deadline (attempt %d)",
                description,
                attempt,
            )
            break

        if is_done(last_observed):
            logger.info(
                "Done waiting for %s after %d attempt(s)", description, attempt
            )
            return last_observed

        logger.debug(
            "Retrying; %s not yet satisfied (attempt %d, observed %r)",
            description,
            attempt,
            last_observed,
        )

        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(poll.tick_interval, remaining))

    raise PollTimeoutError(description, poll.timeout, last_observed)
