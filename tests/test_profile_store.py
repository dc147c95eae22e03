import pytest

from skillsynth.assessment import SessionResult
from skillsynth.config import USER_STORAGE_KEY, CURRICULUM_STORAGE_KEY
from skillsynth.curriculum import EvolvedContent
from skillsynth.errors import SessionStateError
from skillsynth.profiles import ProfileStore, Role, blend_scores, history_stamp, decode_sync_code

from conftest import TODAY


def result(communication=80, confidence=80, teamwork=80, problem_solving=80,
           questions=(), daily_task=False):
    return SessionResult(
        scores={"communication": communication, "confidence": confidence,
                "teamwork": teamwork, "problem_solving": problem_solving},
        questions=list(questions),
        daily_task=daily_task,
    )


def test_blend_averages_with_prior():
    blended = blend_scores({"communication": 60, "confidence": 61, "teamwork": 0, "problem_solving": 40},
                           {"communication": 80, "confidence": 80, "teamwork": 80})

    assert blended == {"communication": 70, "confidence": 71, "teamwork": 80, "problem_solving": 40}


def test_history_stamp_format():
    assert history_stamp(TODAY) == "Oct 19"


def test_sign_up_creates_fresh_profile(profile_store, memory_store):
    profile = profile_store.sign_up("Asha", "7B")

    assert profile.name == "Asha"
    assert profile.class_section == "7B"
    assert profile.scores.as_dict() == {"communication": 0, "confidence": 0, "teamwork": 0, "problem_solving": 0}
    assert profile.streak == 1
    assert profile.progress == 0
    assert len(profile.id) == 8
    assert memory_store.get(USER_STORAGE_KEY)["classSection"] == "7B"


def test_blank_name_gets_role_default(profile_store):
    assert profile_store.sign_up("   ").name == "Student"
    assert profile_store.sign_up("", role=Role.TEACHER).name == "Educator"


def test_login_resumes_matching_profile(memory_store, profile_store):
    first = profile_store.sign_up("Kabir")
    profile_store.record_assessment(result(communication=60))

    reopened = ProfileStore(memory_store, today=lambda: TODAY)
    assert reopened.profile.id == first.id
    resumed = reopened.login("Kabir ")
    assert resumed.id == first.id
    assert resumed.scores.communication == 60


def test_login_with_other_name_starts_fresh(profile_store):
    first = profile_store.sign_up("Kabir")
    other = profile_store.login("Meera")
    assert other.id != first.id
    assert other.scores.communication == 0


def test_first_assessment_takes_scores_as_is(profile_store):
    profile_store.sign_up("Asha")
    profile = profile_store.record_assessment(result(80, 70, 90, 60))

    assert profile.scores.as_dict() == {"communication": 80, "confidence": 70, "teamwork": 90, "problem_solving": 60}
    assert profile.score_history[-1].date == "Oct 19"
    assert profile.score_history[-1].communication == 80


def test_second_assessment_blends(profile_store):
    profile_store.sign_up("Asha")
    profile_store.record_assessment(result(60, 60, 60, 60))
    profile = profile_store.record_assessment(result(80, 81, 60, 0))

    assert profile.scores.as_dict() == {"communication": 70, "confidence": 71, "teamwork": 60, "problem_solving": 30}
    assert len(profile.score_history) == 2


def test_history_keeps_last_ten(profile_store):
    profile_store.sign_up("Asha")
    for score in range(12):
        profile_store.record_assessment(result(communication=50 + score))

    history = profile_store.profile.score_history
    assert len(history) == 10
    assert history[0].communication != 50


def test_streak_counts_daily_tasks_only(profile_store):
    profile_store.sign_up("Asha")
    profile_store.record_assessment(result())
    assert profile_store.profile.streak == 1
    profile_store.record_assessment(result(daily_task=True))
    profile_store.record_assessment(result(daily_task=True))
    assert profile_store.profile.streak == 3


def test_asked_questions_are_deduplicated(profile_store):
    profile_store.sign_up("Asha")
    profile_store.record_assessment(result(questions=["Q1?", "Q2?"]))
    profile_store.record_assessment(result(questions=["Q2?", "Q3?"]))
    assert profile_store.past_questions() == ["Q1?", "Q2?", "Q3?"]


def test_complete_module_updates_progress(profile_store):
    profile_store.sign_up("Asha")
    assert profile_store.complete_module("m1").progress == 13
    assert profile_store.complete_module("m1").progress == 13
    assert profile_store.complete_module("m2").progress == 25
    assert profile_store.profile.completed_modules == ["m1", "m2"]


def test_complete_all_modules_reaches_hundred(profile_store):
    profile_store.sign_up("Asha")
    for module in profile_store.curriculum:
        profile_store.complete_module(module.id)
    assert profile_store.profile.progress == 100


def test_evolved_module_replaces_original(profile_store, memory_store):
    profile_store.sign_up("Asha")
    evolved = EvolvedContent(
        title="Active Listening 2.0",
        content="Go deeper with reflective listening.",
        learning_points=("Paraphrase what you heard",),
        quizzes=(),
    )

    profile_store.complete_module("m1", evolved)

    assert profile_store.curriculum[0].id == "m1_v2"
    assert profile_store.curriculum[0].title == "Active Listening 2.0"
    assert len(profile_store.curriculum) == 8
    assert memory_store.get(CURRICULUM_STORAGE_KEY)[0]["id"] == "m1_v2"

    reopened = ProfileStore(memory_store, today=lambda: TODAY)
    assert reopened.curriculum[0].id == "m1_v2"


def test_logout_clears_storage(profile_store, memory_store):
    profile_store.sign_up("Asha")
    profile_store.complete_module("m1", EvolvedContent("T", "C", (), ()))

    profile_store.logout()

    assert profile_store.profile is None
    assert memory_store.get(USER_STORAGE_KEY) is None
    assert memory_store.get(CURRICULUM_STORAGE_KEY) is None
    assert profile_store.curriculum[0].id == "m1"
    assert profile_store.past_questions() == []


def test_mutations_require_profile(profile_store):
    with pytest.raises(SessionStateError):
        profile_store.record_assessment(result())
    with pytest.raises(SessionStateError):
        profile_store.complete_module("m1")
    with pytest.raises(SessionStateError):
        profile_store.export_sync_code()


def test_overall_score_floors_unassessed(profile_store):
    profile_store.sign_up("Asha")
    assert profile_store.overall_score() == 10
    profile_store.record_assessment(result(80, 60, 0, 0))
    assert profile_store.overall_score() == 40


def test_corrupt_profile_is_ignored(memory_store):
    memory_store.set(USER_STORAGE_KEY, {"bogus": True})
    assert ProfileStore(memory_store).profile is None


def test_export_sync_code_round_trips(profile_store):
    profile_store.sign_up("Asha", "8A")
    profile_store.record_assessment(result(90, 70, 80, 60))
    profile_store.complete_module("m1")

    payload = decode_sync_code(profile_store.export_sync_code())

    assert payload.name == "Asha"
    assert payload.class_section == "8A"
    assert payload.scores.as_dict() == {"communication": 90, "confidence": 70, "teamwork": 80, "problem_solving": 60}
    assert payload.progress == 13
    assert payload.completed_modules == ["m1"]
    assert payload.version == 2
    assert len(payload.score_history) == 1
