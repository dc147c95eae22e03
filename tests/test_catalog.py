from datetime import date

import pytest

from skillsynth.config import CURRICULUM_STORAGE_KEY
from skillsynth.curriculum import (
    CURRICULUM, DAILY_TASKS, CurriculumModule, EvolvedContent, QuizQuestion,
    default_curriculum, load_curriculum, save_curriculum, find_module,
    replace_with_evolved, daily_task_for
)
from skillsynth.infrastructure.data import InMemoryStore


def test_catalog_shape():
    assert [m.id for m in CURRICULUM] == [f"m{i}" for i in range(1, 9)]
    assert sorted({m.week for m in CURRICULUM}) == [1, 2, 3, 4]
    assert all(len(m.learning_points) == 8 for m in CURRICULUM)
    assert len(DAILY_TASKS) == 7


def test_module_dict_uses_wire_skill_names():
    m7 = find_module(CURRICULUM, "m7")
    data = m7.to_dict()

    assert data["skillsFocus"] == ["problemSolving"]
    assert "learningPoints" in data
    assert CurriculumModule.from_dict(data) == m7


def test_quiz_from_dict_checks_answer_index():
    with pytest.raises(ValueError):
        QuizQuestion.from_dict({"id": "q", "question": "?", "options": ["a", "b"], "correctAnswer": 2})


def test_unknown_skill_is_rejected():
    data = CURRICULUM[0].to_dict()
    data["skillsFocus"] = ["juggling"]
    with pytest.raises(ValueError):
        CurriculumModule.from_dict(data)


def test_load_without_override_returns_catalog():
    assert load_curriculum(InMemoryStore()) == list(CURRICULUM)


def test_load_ignores_invalid_override():
    store = InMemoryStore()
    store.set(CURRICULUM_STORAGE_KEY, [{"id": "broken"}])
    assert load_curriculum(store) == default_curriculum()

    store.set(CURRICULUM_STORAGE_KEY, {"not": "a list"})
    assert load_curriculum(store) == default_curriculum()


def test_saved_override_is_loaded():
    store = InMemoryStore()
    curriculum = default_curriculum()[:3]
    save_curriculum(store, curriculum)
    assert load_curriculum(store) == curriculum


def test_evolved_module_inherits_placement():
    evolved = EvolvedContent(
        title="Confidence 2.0",
        content="Harder challenges.",
        learning_points=["Own the room"],
        quizzes=[QuizQuestion("e1", "Best posture?", ("Slouch", "Tall"), 1)],
    )
    original = find_module(CURRICULUM, "m3")

    updated = replace_with_evolved(CURRICULUM, "m3", evolved)

    new = updated[2]
    assert new.id == "m3_v2"
    assert new.week == original.week
    assert new.skills_focus == original.skills_focus
    assert new.visuals == original.visuals
    assert new.learning_points == ("Own the room",)
    assert new.quizzes[0].id == "e1"
    assert find_module(updated, "m3") is None
    assert find_module(CURRICULUM, "m3") is original


def test_evolving_unknown_module_appends():
    updated = replace_with_evolved(CURRICULUM, "m99", EvolvedContent("Extra", "More"))

    assert len(updated) == len(CURRICULUM) + 1
    assert updated[-1].id == "m99_v2"
    assert updated[-1].week == 1
    assert updated[-1].skills_focus == ("communication",)


def test_daily_task_rotates_by_day_of_month():
    assert daily_task_for(date(2026, 10, 19)).id == "t6"
    assert daily_task_for(date(2026, 10, 7)).id == "t1"
    assert daily_task_for(date(2026, 10, 1)).id == "t2"
