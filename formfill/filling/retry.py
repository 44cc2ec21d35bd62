"""
Bounded polling for elements that render late
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """Initial delay, then up to max_attempts checks spaced by interval"""
    initial_delay: float = 0.5
    max_attempts: int = 5
    interval: float = 1.0

    async def wait_for(self, check: Callable[[], Awaitable[bool]]) -> bool:
        """Poll check until it returns True or attempts run out

        Returns:
            True if check succeeded, False once every attempt failed
        """
        await asyncio.sleep(self.initial_delay)

        for attempt in range(1, self.max_attempts + 1):
            if await check():
                logger.debug(f"Check succeeded on attempt {attempt}")
                return True
            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval)

        logger.info(f"Check still failing after {self.max_attempts} attempts")
        return False
