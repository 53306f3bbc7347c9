"""
Visit recording for successful redirects.

Dispatch is best-effort: failures are logged and never reach the client.
In detached mode each dispatch runs as its own asyncio task, so it neither
delays the redirect response nor gets cancelled when the client goes away.
"""

import asyncio
import logging
from typing import Set

from redirection_service.errors import DispatchError
from redirection_service.queue.dispatcher import EventDispatcher
from redirection_service.queue.models import VisitEvent

logger = logging.getLogger(__name__)

# The event loop keeps only weak references to tasks
_pending: Set[asyncio.Task] = set()


async def _dispatch_logged(dispatcher: EventDispatcher, event: VisitEvent) -> None:
    try:
        await dispatcher.dispatch(event)
    except DispatchError as e:
        logger.error("Error sending visit event for key %s: %s", event.tag, e)
    except Exception:
        logger.exception("Unexpected error sending visit event for key %s", event.tag)


async def record_visit(dispatcher: EventDispatcher, key: str, detach: bool = True) -> None:
    """
    Record a visit of ``key`` at the current time.

    Args:
        dispatcher: Dispatch capability
        key: The key that was just resolved
        detach: Run the dispatch as an independent task instead of awaiting it
    """
    event = VisitEvent(tag=key)

    if not detach:
        await _dispatch_logged(dispatcher, event)
        return

    task = asyncio.create_task(_dispatch_logged(dispatcher, event))
    _pending.add(task)
    task.add_done_callback(_pending.discard)


def pending_visits() -> int:
    """Number of detached dispatches still in flight"""
    return len(_pending)


async def wait_for_pending_visits(timeout: float = None) -> None:
    """
    Wait for detached dispatches to finish (used at shutdown).

    Dispatches still running after ``timeout`` seconds are left behind and
    logged.
    """
    tasks = [task for task in _pending if not task.done()]
    if not tasks:
        return

    done, not_done = await asyncio.wait(tasks, timeout=timeout)
    if not_done:
        logger.warning("%d visit event(s) still pending at shutdown", len(not_done))
