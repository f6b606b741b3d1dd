"""
Models package initialization
"""

from .disposal_classifier import DisposalVerdict, DisposalOutcome, DecisionPath, Prediction, classify
from .disposal_tables import DisposalProfile, WasteCategory
from .prediction_source import PredictionSource

__all__ = [
    'DisposalVerdict', 'DisposalOutcome', 'DecisionPath', 'Prediction', 'classify',
    'DisposalProfile', 'WasteCategory', 'PredictionSource'
]
