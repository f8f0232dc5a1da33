"""Upward queue that records keys instead of feeding an upward controller."""

from __future__ import annotations

import logging
from collections import deque
from threading import Lock
from typing import Deque, List

from vc_patrol.ports import UpwardQueue

LOG = logging.getLogger(__name__)


class LoggingUpwardQueue(UpwardQueue):
    def __init__(self, maxlen: int = 10000) -> None:
        self._lock = Lock()
        self._items: Deque[str] = deque(maxlen=maxlen)

    def add(self, key: str) -> None:
        with self._lock:
            self._items.append(key)
        LOG.info("upward sync requested for %s", key)

    def drain(self) -> List[str]:
        with self._lock:
            items = list(self._items)
            self._items.clear()
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
