"""
In-memory audit log
"""
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Mapping, Optional

from ..utils import utc_timestamp

logger = logging.getLogger(__name__)


class AuditLogger:
    """Ordered log of significant coordinator events"""

    def __init__(self, max_entries: Optional[int] = 10000):
        # Oldest entries are evicted first once max_entries is reached
        self.max_entries = max_entries
        self._logs: Deque[Dict[str, Any]] = deque(maxlen=max_entries)

    def log(self, event: Mapping[str, Any]) -> None:
        """Append an event stamped with the current UTC time"""
        entry = {"timestamp": utc_timestamp(), **event}
        self._logs.append(entry)
        logger.debug(f"Audit: {entry.get('eventType')}: {entry.get('message')}")

    def get_logs(self) -> List[Dict[str, Any]]:
        """Return all entries in the order they were logged"""
        return list(self._logs)

    def recent(self, count: int) -> List[Dict[str, Any]]:
        """Return the last count entries"""
        if count <= 0:
            return []
        return list(self._logs)[-count:]

    def clear_logs(self) -> None:
        self._logs.clear()

    def __len__(self) -> int:
        return len(self._logs)
