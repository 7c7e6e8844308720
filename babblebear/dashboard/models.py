from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def _str(payload: dict[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key)
    if value is None:
        return default
    return str(value)


def _float(payload: dict[str, Any], key: str, default: float = 0.0) -> float:
    value = payload.get(key)
    if value is None or value == "":
        return default
    return float(value)


def _optional_float(payload: dict[str, Any], key: str) -> float | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return float(value)


def _count(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None or value == "":
        return 0
    number = float(value)
    if not math.isfinite(number) or number < 0 or not number.is_integer():
        raise ValueError(f"{key} must be a non-negative whole number, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class Child:
    id: str
    name: str
    date_of_birth: str
    gender: str = ""
    weight_at_birth: float | None = None
    height_at_birth: float | None = None
    notes: str = ""
    created_at: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Child":
        return cls(
            id=_str(payload, "id"),
            name=_str(payload, "name"),
            date_of_birth=_str(payload, "date_of_birth"),
            gender=_str(payload, "gender"),
            weight_at_birth=_optional_float(payload, "weight_at_birth"),
            height_at_birth=_optional_float(payload, "height_at_birth"),
            notes=_str(payload, "notes"),
            created_at=_str(payload, "created_at"),
        )


@dataclass(frozen=True)
class Recording:
    id: str
    child_id: str
    session_name: str = ""
    duration: float = 0.0
    recorded_at: str = ""
    is_analyzed: bool = False
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Recording":
        return cls(
            id=_str(payload, "id"),
            child_id=_str(payload, "child_id"),
            session_name=_str(payload, "session_name"),
            duration=_float(payload, "duration"),
            recorded_at=_str(payload, "recorded_at"),
            is_analyzed=bool(payload.get("is_analyzed", False)),
            notes=_str(payload, "notes"),
        )


@dataclass(frozen=True)
class Assessment:
    """Backend assessment record.

    ``dominant_sound_categories`` is kept as received: the backend sends a
    JSON-encoded object, but a decoded mapping is accepted as well.
    """

    child_id: str
    autism_probability: float
    confidence_level: float
    total_recordings_analyzed: int
    dominant_sound_categories: Any = None
    id: str = ""
    assessment_date: str = ""
    behavioral_patterns: str = ""
    recommended_actions: str = ""
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Assessment":
        return cls(
            id=_str(payload, "id"),
            child_id=_str(payload, "child_id"),
            assessment_date=_str(payload, "assessment_date"),
            autism_probability=_float(payload, "autism_probability"),
            confidence_level=_float(payload, "confidence_level"),
            total_recordings_analyzed=_count(payload, "total_recordings_analyzed"),
            dominant_sound_categories=payload.get("dominant_sound_categories"),
            behavioral_patterns=_str(payload, "behavioral_patterns"),
            recommended_actions=_str(payload, "recommended_actions"),
            notes=_str(payload, "notes"),
        )
