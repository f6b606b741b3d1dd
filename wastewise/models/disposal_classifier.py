"""
Label-to-disposal scoring engine
- Keyword-weighted voting over the top raw predictions
- Safety override for broken glass
- Fallback heuristics when the vote has no winner

classify() is a total function: it never raises and always returns a verdict.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .disposal_tables import (
    BROKEN_GLASS_SPECIAL,
    CATEGORY_PROFILES,
    CONTAINER_FALLBACK_KEYWORDS,
    CONTAINER_FALLBACK_NOTE,
    KEYWORD_SCORES,
    LABEL_BONUS,
    MAX_CONSIDERED_PREDICTIONS,
    MIN_WINNING_SCORE,
    PAPER_FALLBACK_KEYWORDS,
    PAPER_FALLBACK_NOTE,
    SAFETY_KEYWORDS,
    SCORE_PRECISION,
    UNKNOWN_FALLBACK,
    WASTE_MAP,
    DisposalProfile,
    WasteCategory,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prediction:
    """One (label, confidence) pair returned by the vision model"""
    label: str
    score: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Prediction":
        """Build a prediction from the {label, score} wire shape"""
        return cls(label=str(data["label"]), score=float(data["score"]))


PredictionLike = Union[Prediction, Mapping[str, Any]]


class DisposalOutcome(Enum):
    """Single UI-facing outcome, derived special > recyclable > compostable > general"""
    SPECIAL = "Special Disposal Required"
    RECYCLABLE = "Recyclable"
    COMPOSTABLE = "Compostable / Green Bin"
    GENERAL = "General Waste (Not Recyclable)"


class DecisionPath(Enum):
    """Which rule of the engine produced the verdict"""
    EMPTY = "empty"
    SAFETY_OVERRIDE = "safety_override"
    VOTE = "vote"
    FALLBACK_PAPER = "fallback_paper"
    FALLBACK_CONTAINER = "fallback_container"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DisposalVerdict:
    """Disposal profile chosen for one classification call"""
    profile_id: str
    type: str
    recyclable: bool
    note: str
    raw_label: str
    compostable: bool = False
    special: bool = False
    decided_by: DecisionPath = DecisionPath.VOTE

    @classmethod
    def from_profile(cls, profile_id: str, raw_label: str, decided_by: DecisionPath,
                     note: Optional[str] = None) -> "DisposalVerdict":
        profile: DisposalProfile = WASTE_MAP[profile_id]
        return cls(
            profile_id=profile_id,
            type=profile.type,
            recyclable=profile.recyclable,
            note=note if note is not None else profile.note,
            raw_label=raw_label,
            compostable=profile.compostable,
            special=profile.special,
            decided_by=decided_by,
        )

    @property
    def outcome(self) -> DisposalOutcome:
        if self.special:
            return DisposalOutcome.SPECIAL
        if self.recyclable:
            return DisposalOutcome.RECYCLABLE
        if self.compostable:
            return DisposalOutcome.COMPOSTABLE
        return DisposalOutcome.GENERAL

    @property
    def badge(self) -> str:
        """Short tag shown on history cards"""
        if self.recyclable:
            return "RECYCLE"
        if self.compostable:
            return "COMPOST"
        return "TRASH"

    def to_dict(self) -> Dict[str, Any]:
        """Outbound shape consumed by callers"""
        return {
            "type": self.type,
            "recyclable": self.recyclable,
            "compostable": self.compostable,
            "special": self.special,
            "note": self.note,
            "rawLabel": self.raw_label,
        }


def _coerce(prediction: PredictionLike) -> Prediction:
    """Accept Prediction objects or raw {label, score} mappings without raising"""
    if isinstance(prediction, Prediction):
        return prediction

    label = prediction.get("label", "") if isinstance(prediction, Mapping) else ""
    raw_score = prediction.get("score", 0.0) if isinstance(prediction, Mapping) else 0.0
    try:
        score = float(raw_score)
    except (TypeError, ValueError, OverflowError):
        score = 0.0
    return Prediction(label="" if label is None else str(label), score=score)


def score_predictions(predictions: Iterable[PredictionLike]) -> Dict[WasteCategory, float]:
    """
    Accumulate keyword-weighted votes per waste category

    Only the first MAX_CONSIDERED_PREDICTIONS entries are scored. Every keyword
    found in a label adds (score + LABEL_BONUS) to its category.

    Args:
        predictions: Raw model predictions, in the order the model returned them

    Returns:
        Accumulated score for every category (zero when nothing matched)
    """
    scores = {category: 0.0 for category in WasteCategory}

    for index, raw in enumerate(predictions):
        if index >= MAX_CONSIDERED_PREDICTIONS:
            break
        prediction = _coerce(raw)
        clean_label = prediction.label.lower().strip()
        weight = prediction.score + LABEL_BONUS

        for category in WasteCategory:
            for keyword in KEYWORD_SCORES[category]:
                if keyword in clean_label:
                    scores[category] += weight

    return scores


def select_category(scores: Mapping[WasteCategory, float]) -> Optional[WasteCategory]:
    """
    Pick the category with the strictly highest score above MIN_WINNING_SCORE

    Ties keep the category that comes first in WasteCategory order.
    """
    winning_category = None
    max_score = 0.0

    for category in WasteCategory:
        score = round(scores.get(category, 0.0), SCORE_PRECISION)
        if score > max_score and score > MIN_WINNING_SCORE:
            max_score = score
            winning_category = category

    return winning_category


def is_hazardous_label(label: str) -> bool:
    """Check the top label against the broken glass safety keywords"""
    lower_label = label.lower()
    return any(keyword in lower_label for keyword in SAFETY_KEYWORDS)


def classify(predictions: Optional[Iterable[PredictionLike]]) -> DisposalVerdict:
    """
    Map raw model predictions to a disposal verdict

    Args:
        predictions: (label, score) pairs in model order; any iterable, may be empty or None

    Returns:
        DisposalVerdict; UNKNOWN_FALLBACK when no usable signal exists
    """
    predictions = list(predictions) if predictions is not None else []
    if not predictions:
        return DisposalVerdict.from_profile(UNKNOWN_FALLBACK, "N/A", DecisionPath.EMPTY)

    top_raw_label = _coerce(predictions[0]).label
    lower_top_label = top_raw_label.lower()

    # Safety first: never recommend curbside recycling for broken glass
    if is_hazardous_label(top_raw_label):
        return DisposalVerdict.from_profile(
            BROKEN_GLASS_SPECIAL, top_raw_label, DecisionPath.SAFETY_OVERRIDE
        )

    scores = score_predictions(predictions)
    winning_category = select_category(scores)
    if logger.isEnabledFor(logging.DEBUG):
        matched = {c.value: round(s, SCORE_PRECISION) for c, s in scores.items() if s}
        logger.debug(f"Category scores for '{top_raw_label}': {matched} -> "
                     f"{winning_category.value if winning_category else None}")

    if winning_category is not None:
        return DisposalVerdict.from_profile(
            CATEGORY_PROFILES[winning_category], top_raw_label, DecisionPath.VOTE
        )

    if any(keyword in lower_top_label for keyword in PAPER_FALLBACK_KEYWORDS):
        return DisposalVerdict.from_profile(
            'paper_default', top_raw_label, DecisionPath.FALLBACK_PAPER, note=PAPER_FALLBACK_NOTE
        )
    if any(keyword in lower_top_label for keyword in CONTAINER_FALLBACK_KEYWORDS):
        return DisposalVerdict.from_profile(
            'rigid_plastic_default', top_raw_label, DecisionPath.FALLBACK_CONTAINER,
            note=CONTAINER_FALLBACK_NOTE,
        )

    return DisposalVerdict.from_profile(UNKNOWN_FALLBACK, top_raw_label, DecisionPath.UNKNOWN)

