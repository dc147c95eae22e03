"""
Adaptive content service: every LLM call the app makes, each with a fixed
degraded result so a failing model never blocks a lesson or a session.
"""
import asyncio
import logging
import re
from dataclasses import replace
from typing import List, Optional, Sequence

from ..config import DEFAULT_GRADE, FULL_AUDIT_STEPS, PAST_QUESTION_WINDOW, QUESTION_TEMPERATURE
from ..curriculum import CurriculumModule, EvolvedContent, QuizQuestion
from .models import InterviewTurn, SessionFeedback
from .prompts import AssessmentPrompts
from .schemas import parse_feedback, fallback_feedback

logger = logging.getLogger("content_service")

BLANK_REPLY_QUESTION = "How would you help a friend who is stuck on a difficult school problem?"
ERROR_QUESTION = "What is your favorite way to work with a team on a school project?"

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_grade(class_section: Optional[str]) -> int:
    """Leading integer of a grade/section label ("8A" -> 8); DEFAULT_GRADE otherwise."""
    match = _LEADING_INT.match(str(class_section or ""))
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    return DEFAULT_GRADE


def clean_question(text: str) -> str:
    """Trim whitespace and one pair of wrapping double quotes."""
    text = text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()


def _string_list(value, field_name: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{field_name}' must be a list of strings")
    return value


class AdaptiveContentService:
    """
    Async facade over the content model.

    The LLM client is synchronous (requests); calls run in a worker thread so
    the session loop keeps ticking while a reply is outstanding.
    """

    def __init__(self, llm_client, scoring_model: Optional[str] = None):
        self.llm_client = llm_client
        self.scoring_model = scoring_model

    async def adapt_content(self, module: CurriculumModule, grade: int) -> CurriculumModule:
        """Rewrite a lesson's body for a grade; the original module on any failure."""
        try:
            data = await asyncio.to_thread(
                self.llm_client.generate_json,
                AssessmentPrompts.adapt_prompt(grade, module.to_dict()),
                system_instruction=AssessmentPrompts.adapt_system(grade),
            )
            content = data.get("content")
            if not isinstance(content, str) or not content.strip():
                raise ValueError("'content' must be a non-empty string")
            adapted = replace(
                module,
                content=content.strip(),
                learning_points=tuple(_string_list(data.get("learningPoints"), "learningPoints")),
                examples=tuple(_string_list(data.get("examples"), "examples")),
            )
            logger.info("Adapted %s for grade %d", module.id, grade)
            return adapted
        except Exception as e:
            logger.error("Content adaptation failed for %s: %s", module.id, e)
            return module

    async def evolve_content(self, module: CurriculumModule, grade: int) -> Optional[EvolvedContent]:
        """Generate the advanced follow-on lesson; None on any failure."""
        try:
            data = await asyncio.to_thread(
                self.llm_client.generate_json,
                AssessmentPrompts.evolve_prompt(module.to_dict()),
                system_instruction=AssessmentPrompts.evolve_system(module.title, grade),
            )
            title, content = data.get("title"), data.get("content")
            if not isinstance(title, str) or not title.strip():
                raise ValueError("'title' must be a non-empty string")
            if not isinstance(content, str) or not content.strip():
                raise ValueError("'content' must be a non-empty string")

            quizzes = []
            for raw in data.get("quizzes") or []:
                try:
                    quizzes.append(QuizQuestion.from_dict(raw))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Dropping malformed evolved quiz %r: %s", raw, e)

            logger.info("Evolved %s into %r", module.id, title)
            return EvolvedContent(
                title=title.strip(),
                content=content.strip(),
                learning_points=_string_list(data.get("learningPoints", []), "learningPoints"),
                quizzes=quizzes,
            )
        except Exception as e:
            logger.error("Module evolution failed for %s: %s", module.id, e)
            return None

    async def next_question(self,
                            history: Sequence[InterviewTurn],
                            step: int,
                            past_questions: Sequence[str] = (),
                            grade: int = DEFAULT_GRADE,
                            total_steps: int = FULL_AUDIT_STEPS) -> str:
        """
        Generate the next interview question.

        Only the most recent past questions are sent. A blank reply and a
        failed call each map to their own fixed question.
        """
        recent = list(past_questions)[-PAST_QUESTION_WINDOW:]
        try:
            text = await asyncio.to_thread(
                self.llm_client.generate_content,
                AssessmentPrompts.question_prompt(history, step, grade, total_steps),
                system_instruction=AssessmentPrompts.question_system(recent),
                temperature=QUESTION_TEMPERATURE,
            )
        except Exception as e:
            logger.error("Question generation failed: %s", e)
            return ERROR_QUESTION

        question = clean_question(text or "")
        if not question:
            logger.warning("Blank question from model at step %d", step)
            return BLANK_REPLY_QUESTION
        logger.info("Question %d: %s", step + 1, question)
        return question

    async def score_transcript(self, history: Sequence[InterviewTurn]) -> SessionFeedback:
        """Score a finished session; the fixed fallback feedback on any failure."""
        try:
            data = await asyncio.to_thread(
                self.llm_client.generate_json,
                AssessmentPrompts.scoring_prompt(history),
                system_instruction=AssessmentPrompts.scoring_system(),
                model=self.scoring_model,
            )
            feedback = parse_feedback(data)
            logger.info("Session scored: %s", feedback.scores)
            return feedback
        except Exception as e:
            logger.error("Transcript scoring failed, using fallback feedback: %s", e)
            return fallback_feedback()
