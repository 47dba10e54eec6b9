import asyncio
import logging
from typing import Awaitable, Set, TypeVar

from domain.errors import TimedOut

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Operations that lost the race keep running; hold a reference until they settle.
_orphans: Set[asyncio.Future] = set()


def _log_orphan_outcome(label: str, future: asyncio.Future) -> None:
    _orphans.discard(future)
    if future.cancelled():
        logger.info("%s finished after its timeout: cancelled", label)
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("%s failed after its timeout: %s", label, exc)
    else:
        logger.info("%s completed after its timeout was reported", label)


async def run_with_timeout(operation: Awaitable[T], seconds: float, label: str = "Operation") -> T:
    """Await ``operation`` for at most ``seconds``.

    On overrun raises ``TimedOut`` and leaves the operation running; its late
    result (or error) is only logged. Unlike ``asyncio.wait_for`` this never
    cancels the guarded work, so side effects such as a slow upload may still
    land after the caller has given up on it.
    """
    future = asyncio.ensure_future(operation)
    done, _ = await asyncio.wait({future}, timeout=seconds)
    if future in done:
        return future.result()

    logger.warning("%s timed out after %ss; leaving it running", label, seconds)
    _orphans.add(future)
    future.add_done_callback(lambda f: _log_orphan_outcome(label, f))
    raise TimedOut(label, seconds)


def pending_orphans() -> int:
    return len(_orphans)
