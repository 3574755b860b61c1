"""Call-site time bounds for user hooks.

Python threads cannot be killed, so an expired call keeps running in the
background; the caller gets an error and its state stays consistent because
nothing from the late call is ever used.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any

from .errors import EvaluationError


def call_with_timeout(
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    timeout: float | None,
    error_cls: type[EvaluationError],
    what: str,
) -> Any:
    """Call fn(*args), raising error_cls if it runs longer than timeout seconds.

    Args:
        fn: User callable.
        args: Positional arguments.
        timeout: Seconds; None calls fn directly on the current thread.
        error_cls: Error raised on expiry (DispatchError or RepairError).
        what: Short label for the error message.

    Returns:
        Whatever fn returns. Exceptions raised by fn propagate unchanged.
    """
    if timeout is None:
        return fn(*args)
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="evoprob-hook")
    future = executor.submit(fn, *args)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout as exc:
        future.cancel()
        raise error_cls(f"{what} timed out after {timeout:g}s") from exc
    finally:
        executor.shutdown(wait=False)
