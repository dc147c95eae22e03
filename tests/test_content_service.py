import json

import pytest

from skillsynth.assessment import AdaptiveContentService, InterviewTurn, parse_feedback, parse_grade
from skillsynth.assessment.content_service import BLANK_REPLY_QUESTION, ERROR_QUESTION, clean_question
from skillsynth.assessment.testing import MockLLMClient
from skillsynth.curriculum import CURRICULUM

SCORING_REPLY = {
    "feedback": "Lovely teamwork ideas!",
    "scores": {"communication": 88, "confidence": 72, "teamwork": 91, "problemSolving": 64},
    "biometrics": {"eyeContact": 80, "voiceModulation": 75, "facialExpression": 83},
    "strengths": [{"title": "Kindness", "description": "You included everyone."}],
    "weaknesses": ["Pace"],
    "improvementAreas": [],
    "vocalDynamics": {"Pace": "A little fast"},
    "growthRoadmap": ["Pause before answering"],
    "aiVision": "Team Builder",
}


@pytest.mark.parametrize("label, grade", [
    ("8A", 8), ("11", 11), ("6-C", 6), ("", 8), (None, 8), ("Grade 7", 8), ("0", 8),
])
def test_parse_grade(label, grade):
    assert parse_grade(label) == grade


def test_clean_question_strips_one_quote_pair():
    assert clean_question('  "What would you do?"\n') == "What would you do?"
    assert clean_question('""Nested""') == '"Nested"'


@pytest.mark.asyncio
async def test_first_question_prompt():
    llm = MockLLMClient(['"Who do you sit with at lunch?"'])
    service = AdaptiveContentService(llm)

    question = await service.next_question([], 0, grade=7)

    assert question == "Who do you sit with at lunch?"
    request = llm.request_history[0]
    assert "first question for a Grade 7 student" in request["prompt"]
    assert request["temperature"] == 0.8


@pytest.mark.asyncio
async def test_follow_up_includes_transcript_and_step():
    llm = MockLLMClient(["Next?"])
    history = [InterviewTurn("Q1?", "I like football")]

    await AdaptiveContentService(llm).next_question(history, 1, total_steps=5)

    prompt = llm.request_history[0]["prompt"]
    assert "Q: Q1?\nA: I like football" in prompt
    assert "Step 2 of 5" in prompt


@pytest.mark.asyncio
async def test_only_recent_past_questions_are_sent():
    llm = MockLLMClient(["Fresh question?"])
    past = [f"past-{i:02d}" for i in range(25)]

    await AdaptiveContentService(llm).next_question([], 0, past_questions=past)

    system = llm.request_history[0]["kwargs"]["system_instruction"]
    assert "past-05" in system
    assert "past-24" in system
    assert "past-04" not in system


@pytest.mark.asyncio
async def test_blank_and_failed_questions_fall_back():
    llm = MockLLMClient(['  ""  ', RuntimeError("Vertex REST error 503")])
    service = AdaptiveContentService(llm)

    assert await service.next_question([], 0) == BLANK_REPLY_QUESTION
    assert await service.next_question([], 0) == ERROR_QUESTION


@pytest.mark.asyncio
async def test_score_transcript_parses_reply():
    llm = MockLLMClient([json.dumps(SCORING_REPLY)])
    service = AdaptiveContentService(llm, scoring_model="gemini-2.5-pro")

    feedback = await service.score_transcript([InterviewTurn("Q?", "A")])

    assert feedback.scores == {"communication": 88, "confidence": 72, "teamwork": 91, "problem_solving": 64}
    assert feedback.biometrics["eye_contact"] == 80
    assert feedback.weaknesses[0].title == "Pace"
    assert feedback.ai_vision == "Team Builder"
    assert not feedback.is_fallback
    assert llm.request_history[0]["kwargs"]["model"] == "gemini-2.5-pro"
    assert "Q: Q?\nA: A" in llm.request_history[0]["prompt"]


@pytest.mark.asyncio
async def test_incomplete_scoring_reply_uses_fallback():
    reply = dict(SCORING_REPLY, scores={"communication": 88})
    service = AdaptiveContentService(MockLLMClient([json.dumps(reply)]))

    feedback = await service.score_transcript([InterviewTurn("Q?", "A")])

    assert feedback.is_fallback
    assert feedback.ai_vision == "Future Leader"


def test_parse_feedback_clamps_scores():
    reply = dict(SCORING_REPLY, scores={"communication": 140, "confidence": "70",
                                        "teamwork": -3, "problemSolving": 64.6})
    feedback = parse_feedback(reply)
    assert feedback.scores == {"communication": 100, "confidence": 70, "teamwork": 0, "problem_solving": 65}


def test_parse_feedback_requires_summary():
    with pytest.raises(ValueError):
        parse_feedback(dict(SCORING_REPLY, feedback="  "))
    with pytest.raises(ValueError):
        parse_feedback(dict(SCORING_REPLY, biometrics=None))


@pytest.mark.asyncio
async def test_adapt_content_rewrites_body():
    module = CURRICULUM[0]
    reply = {"content": "Simple words for you.", "learningPoints": ["Listen"] * 8, "examples": ["Lunch chat"]}
    llm = MockLLMClient([json.dumps(reply)])

    adapted = await AdaptiveContentService(llm).adapt_content(module, 6)

    assert adapted.content == "Simple words for you."
    assert adapted.examples == ("Lunch chat",)
    assert adapted.id == module.id
    assert adapted.quizzes == module.quizzes
    assert "Grade 6" in llm.request_history[0]["kwargs"]["system_instruction"]


@pytest.mark.asyncio
async def test_adapt_content_failure_returns_original():
    module = CURRICULUM[1]
    service = AdaptiveContentService(MockLLMClient(["not json", json.dumps({"content": ""})]))

    assert await service.adapt_content(module, 8) is module
    assert await service.adapt_content(module, 8) is module


@pytest.mark.asyncio
async def test_evolve_content_drops_malformed_quizzes():
    reply = {
        "title": "Communication Basics II: Advanced Tactics",
        "content": "Handling tricky conversations.",
        "learningPoints": ["Stay calm"],
        "quizzes": [
            {"id": "e1", "question": "Best reply?", "options": ["A", "B"], "correctAnswer": 1},
            {"id": "e2", "question": "Broken", "options": ["A"], "correctAnswer": 5},
            {"question": "No id"},
        ],
    }
    evolved = await AdaptiveContentService(MockLLMClient([json.dumps(reply)])).evolve_content(CURRICULUM[0], 8)

    assert evolved.title == "Communication Basics II: Advanced Tactics"
    assert [q.id for q in evolved.quizzes] == ["e1"]
    assert evolved.learning_points == ["Stay calm"]


@pytest.mark.asyncio
async def test_evolve_content_failure_returns_none():
    service = AdaptiveContentService(MockLLMClient([RuntimeError("offline"), json.dumps({"content": "x"})]))
    assert await service.evolve_content(CURRICULUM[0], 8) is None
    assert await service.evolve_content(CURRICULUM[0], 8) is None
