from datetime import date

import pytest

from skillsynth.assessment import FeedbackItem, SessionFeedback
from skillsynth.infrastructure.data import InMemoryStore
from skillsynth.profiles import ProfileStore

TODAY = date(2026, 10, 19)


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def profile_store(memory_store):
    return ProfileStore(memory_store, today=lambda: TODAY)


@pytest.fixture
def sample_feedback():
    return SessionFeedback(
        feedback="You explained your ideas clearly and listened well to the scenario.",
        scores={"communication": 82, "confidence": 74, "teamwork": 90, "problem_solving": 68},
        biometrics={"eye_contact": 80, "voice_modulation": 77, "facial_expression": 85},
        strengths=[FeedbackItem("Clear Voice", "Your answers were easy to follow.")],
        weaknesses=[FeedbackItem("Short Answers", "Add an example next time.")],
        improvement_areas=[FeedbackItem("Examples", "Tell a short story to back up your point.")],
        vocal_dynamics={"Pace": "Steady and calm"},
        growth_roadmap=["Practice the 70/30 rule at lunch", "Lead one group discussion"],
        ai_vision="Team Captain",
    )
