"""
Profile store: the single owner of the signed-in learner and their
curriculum overrides.

Every mutation goes through one of the methods below and is persisted
before it returns. Nothing else writes the profile or curriculum keys.
"""
import logging
import uuid
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Sequence, TYPE_CHECKING

from pydantic import ValidationError

from ..config import (
    USER_STORAGE_KEY, CURRICULUM_STORAGE_KEY, SKILL_DIMENSIONS,
    SCORE_HISTORY_LIMIT, DASHBOARD_SCORE_FLOOR, INITIAL_STREAK
)
from ..curriculum import (
    CurriculumModule, EvolvedContent, default_curriculum, load_curriculum,
    save_curriculum, replace_with_evolved
)
from ..errors import SessionStateError
from ..infrastructure.data import KeyValueStore
from ..utils.numbers import round_half_up, coerce_score
from .models import Role, SkillScores, ScoreSnapshot, UserProfile
from .sync_code import encode_sync_code

if TYPE_CHECKING:
    from ..assessment.models import SessionResult

logger = logging.getLogger("profile_store")


def blend_scores(prior: Mapping[str, int], new: Mapping[str, Optional[int]]) -> Dict[str, int]:
    """
    Fold a session's scores into the running profile scores.

    With a positive prior the result is the rounded mean of prior and new, so
    each session carries half the weight of everything before it. A prior of
    zero means the dimension was never assessed and the new score is taken
    as is. Dimensions missing from ``new`` keep their prior value.
    """
    blended = {}
    for dim in SKILL_DIMENSIONS:
        old = coerce_score(prior.get(dim), default=0)
        fresh = coerce_score(new.get(dim))
        if fresh is None:
            blended[dim] = old
        elif old > 0:
            blended[dim] = round_half_up((old + fresh) / 2)
        else:
            blended[dim] = fresh
    return blended


def history_stamp(day: date) -> str:
    return f"{day:%b} {day.day}"


class ProfileStore:
    """Signed-in profile plus curriculum, persisted through a KeyValueStore."""

    def __init__(self, store: KeyValueStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today
        self.profile: Optional[UserProfile] = self._load_profile()
        self.curriculum: List[CurriculumModule] = load_curriculum(store)

    def _load_profile(self) -> Optional[UserProfile]:
        raw = self.store.get(USER_STORAGE_KEY)
        if raw is None:
            return None
        try:
            return UserProfile.from_wire(raw)
        except ValidationError as e:
            logger.error("Stored profile is unreadable, ignoring it: %s", e)
            return None

    def _save(self) -> None:
        self.store.set(USER_STORAGE_KEY, self.profile.to_wire())

    def _require_profile(self) -> UserProfile:
        if self.profile is None:
            raise SessionStateError("No learner is signed in")
        return self.profile

    # -- sign-in ------------------------------------------------------------

    def sign_up(self, name: str, class_section: str = "8", role: Role = Role.STUDENT) -> UserProfile:
        """Create and persist a fresh profile."""
        name = name.strip() or ("Educator" if role == Role.TEACHER else "Student")
        self.profile = UserProfile(
            id=uuid.uuid4().hex[:8],
            name=name,
            role=role,
            class_section=class_section,
            streak=INITIAL_STREAK,
        )
        self._save()
        logger.info("Signed up %s (%s, grade %s)", self.profile.name, role.value, class_section)
        return self.profile

    def login(self, name: str, class_section: str = "8", role: Role = Role.STUDENT) -> UserProfile:
        """Resume the saved profile when the name matches, else start a new one."""
        saved = self._load_profile()
        if saved is not None and saved.name == name.strip():
            self.profile = saved
            logger.info("Resumed profile for %s", saved.name)
            return saved
        return self.sign_up(name, class_section, role)

    def logout(self) -> None:
        self.profile = None
        self.curriculum = default_curriculum()
        self.store.delete(USER_STORAGE_KEY)
        self.store.delete(CURRICULUM_STORAGE_KEY)
        logger.info("Logged out")

    # -- mutations ----------------------------------------------------------

    def record_assessment(self, result: "SessionResult") -> UserProfile:
        """Blend a finished session's scores and questions into the profile."""
        profile = self._require_profile()
        blended = blend_scores(profile.scores.as_dict(), result.scores)

        history = list(profile.score_history)
        history.append(ScoreSnapshot(date=history_stamp(self.today()), **blended))

        asked = list(profile.asked_questions)
        for question in result.questions:
            if question not in asked:
                asked.append(question)

        self.profile = profile.model_copy(update={
            "scores": SkillScores(**blended),
            "score_history": history[-SCORE_HISTORY_LIMIT:],
            "asked_questions": asked,
            "streak": profile.streak + 1 if result.daily_task else profile.streak,
        })
        self._save()
        logger.info("Recorded assessment for %s: %s", self.profile.name, blended)
        return self.profile

    def complete_module(self, module_id: str, evolved: Optional[EvolvedContent] = None) -> UserProfile:
        """
        Mark a lesson complete, optionally swapping in its evolved version.

        Progress is the share of the (possibly updated) curriculum that has
        been completed.
        """
        profile = self._require_profile()
        if evolved is not None:
            self.curriculum = replace_with_evolved(self.curriculum, module_id, evolved)
            save_curriculum(self.store, self.curriculum)

        completed = list(profile.completed_modules)
        if module_id not in completed:
            completed.append(module_id)
        progress = round_half_up(len(completed) / len(self.curriculum) * 100)

        self.profile = profile.model_copy(update={
            "completed_modules": completed,
            "progress": min(100, progress),
        })
        self._save()
        logger.info("Completed %s: progress %d%%", module_id, self.profile.progress)
        return self.profile

    # -- read-only views ----------------------------------------------------

    def export_sync_code(self) -> str:
        return encode_sync_code(self._require_profile())

    def overall_score(self) -> int:
        """Dashboard index: mean of the four scores with unassessed (0) shown as 10."""
        scores = self._require_profile().scores.as_dict()
        floored = [value or DASHBOARD_SCORE_FLOOR for value in scores.values()]
        return round_half_up(sum(floored) / len(floored))

    def past_questions(self) -> Sequence[str]:
        return list(self.profile.asked_questions) if self.profile else []
