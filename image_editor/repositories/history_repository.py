from __future__ import annotations
from collections import deque
from typing import Deque
import logging
import os

from dotenv import load_dotenv

from ..models.image import Image
from ..models.errors import EmptyHistory

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class HistoryRepository:
    """
    Last-in-first-out store of Image snapshots used for undo.
    Snapshots are cloned on the way in so later edits cannot reach them.
    """

    def __init__(self, limit: int | None = None):
        if limit is None:
            limit = int(os.getenv("HISTORY_LIMIT", "0"))
        # 0 / negative → bounded only by memory
        self.limit = limit if limit > 0 else None
        self._snapshots: Deque[Image] = deque(maxlen=self.limit)

    def push(self, snapshot: Image) -> None:
        if self.limit is not None and len(self._snapshots) == self.limit:
            logger.debug(f"History limit {self.limit} reached, dropping oldest snapshot")
        self._snapshots.append(snapshot.clone())

    def pop(self) -> Image:
        if not self._snapshots:
            raise EmptyHistory("Nothing to undo")
        return self._snapshots.pop()

    def peek(self) -> Image:
        if not self._snapshots:
            raise EmptyHistory("Nothing to undo")
        return self._snapshots[-1]

    def clear(self) -> None:
        self._snapshots.clear()

    @property
    def is_empty(self) -> bool:
        return not self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
