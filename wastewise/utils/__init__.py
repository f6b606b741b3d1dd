"""
Utilities package initialization
"""

from .data_logger import DataLogger
from .history import ClassificationHistory, HistoryItem
from .retry import RetryPolicy, exponential_backoff

__all__ = ['DataLogger', 'ClassificationHistory', 'HistoryItem', 'RetryPolicy', 'exponential_backoff']
