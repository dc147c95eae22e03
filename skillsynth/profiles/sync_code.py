"""
DNA sync codes: a student's profile packed into a copy-pasteable string.

A code is base64 over compact JSON::

    {"n": name, "g": class section, "s": {scores}, "p": progress,
     "st": streak, "m": [completed modules], "h": [history], "v": 2}

Codes without ``v`` come from the first format (no history) and are still
accepted. Codes from a newer format than this build understands are refused.
"""
import base64
import binascii
import json
import logging
import math
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import SYNC_CODE_VERSION
from ..errors import SyncCodeError
from .models import SkillScores, ScoreSnapshot, UserProfile, score_or_raise

logger = logging.getLogger("sync_code")


def _require_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value!r}")
    return value


class _StrictScores(SkillScores):
    """All four dimensions required, as JSON numbers."""
    communication: int
    confidence: int
    teamwork: int
    problem_solving: int

    @field_validator("communication", "confidence", "teamwork", "problem_solving", mode="before")
    @classmethod
    def _clamp(cls, value):
        return score_or_raise(_require_number(value))


class SyncPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="n", min_length=1)
    class_section: str = Field(default="", alias="g")
    scores: _StrictScores = Field(alias="s")
    progress: int = Field(alias="p")
    streak: Optional[int] = Field(default=None, alias="st")
    completed_modules: List[str] = Field(default_factory=list, alias="m")
    score_history: List[ScoreSnapshot] = Field(default_factory=list, alias="h")
    version: int = Field(default=1, alias="v")

    @field_validator("name")
    @classmethod
    def _not_blank(cls, value):
        if not value.strip():
            raise ValueError("name must not be blank")
        return value

    @field_validator("class_section", mode="before")
    @classmethod
    def _section_text(cls, value):
        # Grades were sometimes exported as bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value):
        number = _require_number(value)
        return max(0, min(100, int(round(number))))


def encode_sync_code(profile: UserProfile) -> str:
    payload: Dict = {
        "n": profile.name,
        "g": profile.class_section,
        "s": profile.scores.to_wire(),
        "p": profile.progress,
        "st": profile.streak,
        "m": list(profile.completed_modules),
        "h": [snap.to_wire() for snap in profile.score_history],
        "v": SYNC_CODE_VERSION,
    }
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_sync_code(code: str) -> SyncPayload:
    """
    Decode and validate a sync code.

    Raises:
        SyncCodeError: If the code is not base64 JSON of the expected shape
    """
    try:
        raw = base64.b64decode("".join(code.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise SyncCodeError("Sync code is not valid base64") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        # First-format codes were produced byte-per-character
        text = raw.decode("latin-1")

    try:
        data = json.loads(text)
    except ValueError as e:
        # Also covers integers longer than the interpreter's digit limit
        raise SyncCodeError("Sync code does not contain JSON") from e

    if not isinstance(data, dict):
        raise SyncCodeError("Sync code must hold a JSON object")

    version = data.get("v", 1)
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise SyncCodeError(f"Invalid sync code version: {version!r}")
    if version > SYNC_CODE_VERSION:
        raise SyncCodeError(
            f"Sync code version {version} is newer than supported version {SYNC_CODE_VERSION}"
        )

    try:
        payload = SyncPayload.model_validate(data)
    except ValidationError as e:
        raise SyncCodeError(f"Sync code failed validation: {e.error_count()} error(s)") from e

    logger.debug("Decoded sync code for %s (v%d)", payload.name, payload.version)
    return payload
