"""
Prompt templates for lesson adaptation, question generation and scoring.

Kept apart from the service logic so wording can be edited in one place.
"""

import json
from typing import Dict, List, Sequence

from .models import InterviewTurn


def format_transcript(history: Sequence[InterviewTurn]) -> str:
    return "\n\n".join(f"Q: {turn.question}\nA: {turn.answer}" for turn in history)


class AssessmentPrompts:
    """Collection of all prompts sent to the content model."""

    @staticmethod
    def adapt_system(grade: int) -> str:
        return f"""
You are an AI Education Specialist. Your task is to adapt a soft-skills lesson for a student in Grade {grade}.
Return a JSON object with updated 'content', 'learningPoints', and 'examples'.
Ensure 'learningPoints' has exactly 8 items.
        """.strip()

    @staticmethod
    def adapt_prompt(grade: int, module: Dict) -> str:
        return f"Adapt this module for a Grade {grade} student:\n{json.dumps(module, ensure_ascii=False)}"

    @staticmethod
    def evolve_system(title: str, grade: int) -> str:
        return f"""
You are an AI Mastery Architect. The student has mastered the basic version of "{title}".
Generate "Level 2: Advanced Concepts" for this module.
Focus on complex scenarios, nuance, and professional-level soft skills appropriate for Grade {grade}.
Return a JSON object with a NEW 'title' (e.g., "{title} II: Advanced Tactics"), 'content', 'learningPoints', and 'quizzes'.
Each quiz is {{"id": "<string>", "question": "<string>", "options": ["<string>", ...], "correctAnswer": <index>}}.
        """.strip()

    @staticmethod
    def evolve_prompt(module: Dict) -> str:
        return f"Evolve this module to an advanced level:\n{json.dumps(module, ensure_ascii=False)}"

    @staticmethod
    def question_system(past_questions: List[str]) -> str:
        return f"""
You are a friendly AI Mentor for school kids (Grades 6-12).
Your goal is to ask EASY, simple, and very short soft-skill questions.

CRITICAL RULES:
1. Ask ONLY ONE simple question.
2. Make the scenario very relatable to school life (friends, lunch, sports, projects).
3. Use very easy words. No complex jargon.
4. Be super encouraging and kind.
5. Avoid repeating themes or previous questions: {' | '.join(past_questions)}

Return ONLY the question string.
        """.strip()

    @staticmethod
    def question_prompt(history: Sequence[InterviewTurn], step: int, grade: int, total_steps: int) -> str:
        if not history:
            return f"Ask an EASY, friendly first question for a Grade {grade} student. Focus on communication."
        return (
            f"The student said:\n{format_transcript(history)}\n\n"
            f"Ask the NEXT easy question (Step {step + 1} of {total_steps}) "
            f"about a different skill like confidence or teamwork."
        )

    @staticmethod
    def scoring_system() -> str:
        return """
Analyze the student's conversation. Be an encouraging AI Coach.
Scores must be 1-100. Give high scores (70-90) to keep them motivated!
Return a structured JSON object:
{
  "feedback": "<warm summary>",
  "scores": {"communication": <n>, "confidence": <n>, "teamwork": <n>, "problemSolving": <n>},
  "biometrics": {"eyeContact": <n>, "voiceModulation": <n>, "facialExpression": <n>},
  "strengths": [{"title": "<short>", "description": "<one sentence>"}],
  "weaknesses": [{"title": "<short>", "description": "<one sentence>"}],
  "improvementAreas": [{"title": "<short>", "description": "<one sentence>"}],
  "vocalDynamics": {"<label>": "<observation>"},
  "growthRoadmap": ["<next step>", "..."],
  "aiVision": "<two or three word title>"
}
Respond ONLY with minified JSON (no code fences).
        """.strip()

    @staticmethod
    def scoring_prompt(history: Sequence[InterviewTurn]) -> str:
        return f"Provide warm feedback for this student transcript:\n\n{format_transcript(history)}"
