"""
Curriculum data types, persistence and the evolved-module rule.

Modules are stored in the curriculum override key using the same camelCase
field names that exported lesson JSON has always used.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import CURRICULUM_STORAGE_KEY, SKILL_DIMENSIONS, WIRE_SKILL_KEYS
from ..infrastructure.data import KeyValueStore

logger = logging.getLogger("curriculum")

_FROM_WIRE = {wire: name for name, wire in WIRE_SKILL_KEYS.items()}

EVOLVED_SUFFIX = "_v2"


@dataclass(frozen=True)
class QuizQuestion:
    id: str
    question: str
    options: Tuple[str, ...]
    correct_answer: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizQuestion":
        options = tuple(str(o) for o in data["options"])
        correct = int(data["correctAnswer"])
        if not 0 <= correct < len(options):
            raise ValueError(f"Quiz {data.get('id')!r} answer index {correct} out of range")
        return cls(id=str(data["id"]), question=str(data["question"]),
                   options=options, correct_answer=correct)


@dataclass(frozen=True)
class ModuleVisuals:
    image: Optional[str] = None
    video_url: Optional[str] = None
    video_placeholder: Optional[str] = None


@dataclass(frozen=True)
class CurriculumModule:
    """One lesson. Instances are never mutated; adaptation builds a copy."""
    id: str
    week: int
    title: str
    description: str
    content: str
    learning_points: Tuple[str, ...]
    examples: Tuple[str, ...]
    quizzes: Tuple[QuizQuestion, ...]
    skills_focus: Tuple[str, ...]
    visuals: Optional[ModuleVisuals] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "week": self.week,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "learningPoints": list(self.learning_points),
            "examples": list(self.examples),
            "quizzes": [q.to_dict() for q in self.quizzes],
            "skillsFocus": [WIRE_SKILL_KEYS[s] for s in self.skills_focus],
        }
        if self.visuals is not None:
            data["visuals"] = {
                "image": self.visuals.image,
                "videoUrl": self.visuals.video_url,
                "videoPlaceholder": self.visuals.video_placeholder,
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CurriculumModule":
        skills = []
        for skill in data.get("skillsFocus", []):
            name = _FROM_WIRE.get(skill, skill)
            if name not in SKILL_DIMENSIONS:
                raise ValueError(f"Unknown skill {skill!r} in module {data.get('id')!r}")
            skills.append(name)

        visuals = None
        if isinstance(data.get("visuals"), dict):
            v = data["visuals"]
            visuals = ModuleVisuals(v.get("image"), v.get("videoUrl"), v.get("videoPlaceholder"))

        return cls(
            id=str(data["id"]),
            week=int(data["week"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            content=str(data["content"]),
            learning_points=tuple(str(p) for p in data.get("learningPoints", [])),
            examples=tuple(str(e) for e in data.get("examples", [])),
            quizzes=tuple(QuizQuestion.from_dict(q) for q in data.get("quizzes", [])),
            skills_focus=tuple(skills),
            visuals=visuals,
        )


@dataclass(frozen=True)
class DailyTask:
    id: str
    title: str
    description: str
    skill: str


@dataclass
class EvolvedContent:
    """Advanced follow-on lesson material returned by the content service."""
    title: str
    content: str
    learning_points: List[str] = field(default_factory=list)
    quizzes: List[QuizQuestion] = field(default_factory=list)


def build_evolved_module(original: CurriculumModule, evolved: EvolvedContent) -> CurriculumModule:
    """
    Turn evolved material into a module that stands in for ``original``.

    The new module keeps the original's week, focus, description, examples
    and visuals; its id is the original id with ``_v2`` appended.
    """
    return replace(
        original,
        id=f"{original.id}{EVOLVED_SUFFIX}",
        title=evolved.title,
        content=evolved.content,
        learning_points=tuple(evolved.learning_points),
        quizzes=tuple(evolved.quizzes),
    )


def replace_with_evolved(curriculum: Sequence[CurriculumModule],
                         module_id: str,
                         evolved: EvolvedContent) -> List[CurriculumModule]:
    """
    Return a new curriculum with ``module_id`` replaced by its evolved form.

    If ``module_id`` is not in the curriculum the evolved module is appended,
    inheriting week 1 and a communication focus.
    """
    result = list(curriculum)
    for idx, module in enumerate(result):
        if module.id == module_id:
            result[idx] = build_evolved_module(module, evolved)
            return result

    logger.warning("Evolved module %s has no original in curriculum; appending", module_id)
    placeholder = CurriculumModule(
        id=module_id, week=1, title=evolved.title, description="", content=evolved.content,
        learning_points=(), examples=(), quizzes=(), skills_focus=("communication",),
    )
    result.append(build_evolved_module(placeholder, evolved))
    return result


def default_curriculum() -> List[CurriculumModule]:
    from .content import CURRICULUM
    return list(CURRICULUM)


def load_curriculum(store: KeyValueStore) -> List[CurriculumModule]:
    """Persisted curriculum override if present and valid, else the static catalog."""
    raw = store.get(CURRICULUM_STORAGE_KEY)
    if raw is None:
        return default_curriculum()
    try:
        if not isinstance(raw, list) or not raw:
            raise ValueError("curriculum override must be a non-empty list")
        return [CurriculumModule.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Ignoring stored curriculum override: %s", e)
        return default_curriculum()


def save_curriculum(store: KeyValueStore, curriculum: Sequence[CurriculumModule]) -> None:
    store.set(CURRICULUM_STORAGE_KEY, [m.to_dict() for m in curriculum])


def find_module(curriculum: Sequence[CurriculumModule], module_id: str) -> Optional[CurriculumModule]:
    for module in curriculum:
        if module.id == module_id:
            return module
    return None


def daily_task_for(day: date) -> DailyTask:
    """Task of the day: the day of month indexes the seven tasks cyclically."""
    from .content import DAILY_TASKS
    return DAILY_TASKS[day.day % len(DAILY_TASKS)]
