# memelinks/jobs/session_sweeper.py
# Periodic pruning of the session registry, run as a lifespan background task

import asyncio
import logging

from memelinks.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


async def run_session_sweeper(registry: SessionRegistry, interval_seconds: float, stop_event: asyncio.Event) -> None:
    """Call registry.sweep() every interval until stop_event is set."""
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass
        if stop_event.is_set():
            break
        try:
            registry.sweep()
        except Exception:
            logger.exception("session sweep failed")
