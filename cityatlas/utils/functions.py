__all__ = (
    "chunked",
    "run_blocking",
)

import asyncio
import functools
from typing import Sequence


def chunked(seq: Sequence, size: int):
    """Yields successive slices of *seq*, each no longer than *size*."""
    if size < 1:
        raise ValueError("size must be positive")
    for start in range(0, len(seq), size):
        yield seq[start : start + size]


async def run_blocking(func, *args, executor=None, **kwargs):
    """
    Runs a blocking callable in an executor and returns its result, so file I/O and CPU-heavy work stay off the
    event loop.

    :param func: The callable to run
    :param executor: A concurrent.futures executor, or None for the loop's default executor
    """
    return await asyncio.get_event_loop().run_in_executor(executor, functools.partial(func, *args, **kwargs))
