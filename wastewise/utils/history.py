"""
In-memory classification history
Keeps the most recent verdicts (newest first) with their source images
"""

import base64
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from ..models.disposal_classifier import DisposalVerdict

DEFAULT_MAX_ITEMS = 5


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode image bytes as a base64 data URL"""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


@dataclass(frozen=True)
class HistoryItem:
    """One classification kept in history"""
    verdict: DisposalVerdict
    image_src: str
    timestamp: float

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        data = self.verdict.to_dict()
        data.update({
            "imageSrc": self.image_src,
            "timestamp": self.timestamp,
            "datetime": datetime.fromtimestamp(self.timestamp).isoformat(),
            "badge": self.verdict.badge,
        })
        return data


class ClassificationHistory:
    """
    Bounded, thread-safe history of verdicts

    New items are prepended; once max_items is exceeded the oldest item is dropped.
    """

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")

        self.max_items = max_items
        self._items: List[HistoryItem] = []
        self.lock = threading.Lock()

        self.setup_logging()

    def setup_logging(self):
        """Setup logging"""
        self.logger = logging.getLogger(__name__)

    def add(self, verdict: DisposalVerdict, image_bytes: bytes, mime_type: str,
            timestamp: Optional[float] = None) -> HistoryItem:
        """
        Record a verdict together with the image it was computed from

        Args:
            verdict: Classifier output
            image_bytes: Source image
            mime_type: Source image MIME type
            timestamp: Epoch seconds, defaults to now

        Returns:
            The stored history item
        """
        item = HistoryItem(
            verdict=verdict,
            image_src=to_data_url(image_bytes, mime_type),
            timestamp=time.time() if timestamp is None else timestamp,
        )

        with self.lock:
            self._items = [item] + self._items[:self.max_items - 1]

        self.logger.debug(f"History now holds {len(self._items)} items")
        return item

    def items(self) -> List[HistoryItem]:
        """Snapshot of the history, newest first"""
        with self.lock:
            return list(self._items)

    def latest(self) -> Optional[HistoryItem]:
        with self.lock:
            return self._items[0] if self._items else None

    def clear(self):
        """Remove all history items"""
        with self.lock:
            self._items = []
        self.logger.info("Classification history cleared")

    def to_dict(self) -> List[Dict]:
        return [item.to_dict() for item in self.items()]

    def __len__(self) -> int:
        with self.lock:
            return len(self._items)
