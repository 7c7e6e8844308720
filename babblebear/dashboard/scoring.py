from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any, Sequence

import numpy as np

from babblebear.dashboard.models import Assessment


DEFAULT_SCORE = 75
FALLBACK_SCORE = 65

PROBABILITY_WEIGHT = 0.6
CONFIDENCE_WEIGHT = 10.0
RECORDING_WEIGHT = 2.0
RECORDING_BOOST_CAP = 10.0

# (upper bound inclusive, multiplier, offset)
UNKNOWN_PENALTY_BANDS: tuple[tuple[float, float, float], ...] = (
    (20.0, 0.2, 0.0),
    (50.0, 0.4, 5.0),
    (math.inf, 0.6, 15.0),
)


class MalformedCategoriesError(ValueError):
    pass


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_sound_categories(raw: Any) -> dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedCategoriesError(f"sound categories are not valid JSON: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise MalformedCategoriesError(f"sound categories must be an object, got {type(raw).__name__}")
    return dict(raw)


def unknown_percentage(categories: Mapping[str, Any]) -> float:
    value = categories.get("unknown")
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise MalformedCategoriesError("unknown percentage must be numeric")
    try:
        unknown = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedCategoriesError(f"unknown percentage must be numeric: {value!r}") from exc
    if math.isnan(unknown):
        raise MalformedCategoriesError("unknown percentage is NaN")
    return unknown


def unknown_penalty(unknown: float) -> float:
    if unknown <= 0:
        return 0.0
    for upper, multiplier, offset in UNKNOWN_PENALTY_BANDS:
        if unknown <= upper:
            return unknown * multiplier + offset
    return 0.0


class ScoreAggregator:
    """Turns backend assessments into the 0-100 babble score shown to parents."""

    def compute_score(self, assessment: Assessment | None) -> int:
        if assessment is None:
            return DEFAULT_SCORE

        try:
            categories = parse_sound_categories(assessment.dominant_sound_categories)
            unknown = unknown_percentage(categories)
        except MalformedCategoriesError as exc:
            logging.warning("Malformed sound categories for child %s: %s", assessment.child_id, exc)
            return FALLBACK_SCORE

        base = 100.0 - float(assessment.autism_probability) * PROBABILITY_WEIGHT
        confidence_boost = float(assessment.confidence_level) * CONFIDENCE_WEIGHT
        volume_boost = min(float(assessment.total_recordings_analyzed) * RECORDING_WEIGHT, RECORDING_BOOST_CAP)
        raw = base - unknown_penalty(unknown) + confidence_boost + volume_boost

        if math.isnan(raw):
            logging.warning("Undefined babble score for child %s", assessment.child_id)
            return FALLBACK_SCORE
        return round_half_up(float(np.clip(raw, 0.0, 100.0)))

    def compute_average(self, scores: Sequence[int]) -> int:
        if len(scores) == 0:
            return DEFAULT_SCORE
        return round_half_up(float(np.mean(np.asarray(scores, dtype=np.float64))))


_aggregator = ScoreAggregator()
compute_score = _aggregator.compute_score
compute_average = _aggregator.compute_average


def score_label(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    return "Needs Attention"


def risk_level(probability: float) -> str:
    if probability <= 25:
        return "low"
    if probability <= 50:
        return "moderate"
    return "high"
