"""
Learner profile models.

Profiles are persisted and exported with camelCase keys (``classSection``,
``problemSolving``) so stored sessions and sync codes stay readable by
existing installs.
"""
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import SKILL_DIMENSIONS, SCORE_HISTORY_LIMIT, INITIAL_STREAK
from ..utils.numbers import coerce_score


def score_or_raise(value) -> int:
    score = coerce_score(value)
    if score is None:
        raise ValueError(f"score must be a number, got {value!r}")
    return score


class Role(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict:
        return self.model_dump(mode="json", by_alias=True)


class SkillScores(_CamelModel):
    """The four skill dimensions, each clamped to 0-100."""
    communication: int = 0
    confidence: int = 0
    teamwork: int = 0
    problem_solving: int = 0

    @field_validator("communication", "confidence", "teamwork", "problem_solving", mode="before")
    @classmethod
    def _clamp(cls, value):
        return score_or_raise(value)

    def as_dict(self) -> Dict[str, int]:
        return {dim: getattr(self, dim) for dim in SKILL_DIMENSIONS}


class ScoreSnapshot(SkillScores):
    """One dated entry in a profile's score history."""
    date: str


class UserProfile(_CamelModel):
    id: str
    name: str
    role: Role = Role.STUDENT
    class_section: str = "8"
    progress: int = 0
    scores: SkillScores = Field(default_factory=SkillScores)
    score_history: List[ScoreSnapshot] = Field(default_factory=list)
    completed_modules: List[str] = Field(default_factory=list)
    badges: List[str] = Field(default_factory=list)
    asked_questions: List[str] = Field(default_factory=list)
    streak: int = INITIAL_STREAK

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value):
        progress = coerce_score(value)
        if progress is None:
            raise ValueError(f"progress must be a number, got {value!r}")
        return progress

    @field_validator("score_history")
    @classmethod
    def _trim_history(cls, value):
        return value[-SCORE_HISTORY_LIMIT:]

    @field_validator("completed_modules", "asked_questions")
    @classmethod
    def _dedupe(cls, value):
        return list(dict.fromkeys(value))

    @classmethod
    def from_wire(cls, data: Dict) -> "UserProfile":
        return cls.model_validate(data)
