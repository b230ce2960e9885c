"""
Fixed-interval polling for reads and writes against Azure AD, which only
becomes consistent some seconds after a change is accepted
"""

import asyncio
from typing import Any, Awaitable, Callable

from provisioning.errors import ExitCode, RetryExhaustedError

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_INTERVAL_SECONDS = 3


async def poll_until(
    probe: Callable[[], Awaitable[Any]],
    is_done: Callable[[Any], bool] = bool,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    description: str = "value",
    exit_code: ExitCode = ExitCode.UNEXPECTED_ERROR,
    verbose: bool = False,
) -> Any:
    """
    Await probe() until is_done(result) holds and return that result.

    Sleeps `interval` seconds between attempts. Raises RetryExhaustedError
    carrying `exit_code` once `max_attempts` probes came back unfinished.
    """

    for attempt in range(1, max_attempts + 1):
        result = await probe()
        if is_done(result):
            if attempt > 1:
                print(f"   {description} available after {attempt} attempt(s)")
            return result

        if verbose:
            print(f"   Attempt {attempt}/{max_attempts}: {description} not available yet")

        if attempt < max_attempts:
            await asyncio.sleep(interval)

    print(f"   Gave up waiting for {description} after {max_attempts} attempt(s)")
    raise RetryExhaustedError(
        f"Timed out waiting for {description} after {max_attempts} attempts",
        exit_code=exit_code,
        attempts=max_attempts,
    )
