"""
Session state enums and parsing of the scoring model's reply.
"""
import copy
from enum import Enum
from typing import Any, Dict, List

from ..config import SKILL_DIMENSIONS, WIRE_SKILL_KEYS
from ..utils.numbers import coerce_score
from .models import FeedbackItem, SessionFeedback


class SessionState(str, Enum):
    """Assessment lifecycle states."""
    INTRO = "intro"
    ACTIVE = "active"
    PROCESSING = "processing"
    REPORT = "report"
    ABORTED = "aborted"


class StepOutcome(str, Enum):
    """Result of stopping a recording."""
    RETRY = "retry"
    ADVANCED = "advanced"
    COMPLETED = "completed"
    ABORTED = "aborted"


BIOMETRIC_KEYS = {
    "eye_contact": "eyeContact",
    "voice_modulation": "voiceModulation",
    "facial_expression": "facialExpression",
}

FALLBACK_FEEDBACK = SessionFeedback(
    feedback="You're doing great!",
    scores={"communication": 85, "confidence": 80, "teamwork": 82, "problem_solving": 78},
    biometrics={"eye_contact": 88, "voice_modulation": 82, "facial_expression": 85},
    strengths=[FeedbackItem("Friendly Tone", "You are very welcoming.")],
    weaknesses=[FeedbackItem("Structure", "Keep practicing!")],
    improvement_areas=[FeedbackItem("Detail", "Try adding one more sentence.")],
    ai_vision="Future Leader",
    is_fallback=True,
)


def fallback_feedback() -> SessionFeedback:
    """A fresh copy of the fixed feedback used when scoring fails."""
    return copy.deepcopy(FALLBACK_FEEDBACK)


def _numeric_block(data: Dict[str, Any], key: str, names: Dict[str, str]) -> Dict[str, int]:
    block = data.get(key)
    if not isinstance(block, dict):
        raise ValueError(f"'{key}' must be an object, got {type(block).__name__}")
    values = {}
    for name, wire in names.items():
        value = coerce_score(block.get(wire, block.get(name)))
        if value is None:
            raise ValueError(f"'{key}.{wire}' must be a number")
        values[name] = value
    return values


def _items(data: Dict[str, Any], key: str) -> List[FeedbackItem]:
    items = []
    for raw in data.get(key) or []:
        if isinstance(raw, dict) and isinstance(raw.get("title"), str):
            items.append(FeedbackItem(raw["title"], str(raw.get("description", ""))))
        elif isinstance(raw, str):
            items.append(FeedbackItem(raw))
    return items


def parse_feedback(data: Dict[str, Any]) -> SessionFeedback:
    """
    Build SessionFeedback from the scoring model's JSON.

    ``feedback``, all four ``scores`` and the three ``biometrics`` are
    required; list sections default to empty. Scores are clamped to 0-100.

    Raises:
        ValueError: If a required field is missing or not numeric
    """
    if not isinstance(data.get("feedback"), str) or not data["feedback"].strip():
        raise ValueError("'feedback' must be a non-empty string")

    vocal = data.get("vocalDynamics") or {}
    roadmap = data.get("growthRoadmap") or []

    return SessionFeedback(
        feedback=data["feedback"].strip(),
        scores=_numeric_block(data, "scores", {dim: WIRE_SKILL_KEYS[dim] for dim in SKILL_DIMENSIONS}),
        biometrics=_numeric_block(data, "biometrics", BIOMETRIC_KEYS),
        strengths=_items(data, "strengths"),
        weaknesses=_items(data, "weaknesses"),
        improvement_areas=_items(data, "improvementAreas"),
        vocal_dynamics={str(k): str(v) for k, v in vocal.items()} if isinstance(vocal, dict) else {},
        growth_roadmap=[str(step) for step in roadmap] if isinstance(roadmap, list) else [],
        ai_vision=str(data.get("aiVision") or "").strip(),
    )
