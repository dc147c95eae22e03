"""Learner profiles, score blending, sync codes and the class roster."""

from .models import Role, SkillScores, ScoreSnapshot, UserProfile
from .store import ProfileStore, blend_scores, history_stamp
from .sync_code import SyncPayload, encode_sync_code, decode_sync_code
from .roster import ClassRoster, RosterEntry

__all__ = [
    "Role", "SkillScores", "ScoreSnapshot", "UserProfile",
    "ProfileStore", "blend_scores", "history_stamp",
    "SyncPayload", "encode_sync_code", "decode_sync_code",
    "ClassRoster", "RosterEntry",
]
