import asyncio
import random
from typing import Awaitable, Callable, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


def backoff_delays(
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: float = 0.1,
    attempts: Optional[int] = None,
) -> Iterator[float]:
    """Yield exponentially growing sleep durations.

    Each delay doubles the previous one up to ``max_delay`` and adds up to
    ``jitter * delay`` of random spread. Infinite when ``attempts`` is None.
    """
    delay = base_delay
    produced = 0
    while attempts is None or produced < attempts:
        yield min(delay, max_delay) + random.uniform(0, delay * jitter)
        produced += 1
        delay = min(delay * 2, max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    retries: int = 5,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: float = 0.1,
    retry_on: Iterable[type[BaseException]] = (Exception,),
    on_retry: Optional[
        Callable[[int, BaseException, float], Awaitable[None] | None]
    ] = None,
) -> T:
    retry_on = tuple(retry_on)
    delays = backoff_delays(base_delay, max_delay, jitter, attempts=retries - 1)
    for attempt in range(retries):
        try:
            return await func()
        except retry_on as exc:  # type: ignore[misc]
            if attempt == retries - 1:
                raise
            sleep_for = next(delays)
            if on_retry:
                result = on_retry(attempt + 1, exc, sleep_for)
                if result is not None:
                    await result  # support async callback
            await asyncio.sleep(sleep_for)
    raise RuntimeError("async retry exhausted")
