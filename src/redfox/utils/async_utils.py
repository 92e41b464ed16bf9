"""Event-loop runner with graceful interrupt handling."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import threading
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_interrupt(
    coro: Coroutine[Any, Any, T],
    on_interrupt: Callable[[], None] | None = None,
) -> T:
    """Run ``coro`` in a fresh event loop.

    The first SIGINT calls ``on_interrupt`` so the caller can wind down and
    still return partial results. A second SIGINT cancels every task and
    surfaces as ``KeyboardInterrupt``.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    interrupts = 0

    def handle_sigint() -> None:
        nonlocal interrupts
        interrupts += 1
        if interrupts == 1 and on_interrupt is not None:
            logger.warning("Interrupt received, finishing in-flight attempts (Ctrl+C again to abort)")
            on_interrupt()
            return
        for task in asyncio.all_tasks(loop):
            task.cancel()

    # Signal handlers are only available on Unix main thread.
    installed = False
    if sys.platform != "win32" and threading.current_thread() is threading.main_thread():
        loop.add_signal_handler(signal.SIGINT, handle_sigint)
        installed = True

    try:
        return loop.run_until_complete(coro)
    except asyncio.CancelledError:
        if interrupts:
            raise KeyboardInterrupt from None
        raise
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)
        try:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            loop.close()
