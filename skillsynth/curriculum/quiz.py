"""
Timed multiple-choice mastery challenge for a lesson.
"""
import logging
from typing import Optional, Sequence

from ..config import QUIZ_LIVES, QUESTION_TIME_LIMIT, QUIZ_CORRECT_POINTS, QUIZ_TIME_BONUS
from ..errors import SessionStateError
from ..utils.numbers import round_half_up, clamp
from .catalog import QuizQuestion

logger = logging.getLogger("quiz")


class QuizSession:
    """
    Runs a lesson's quizzes with lives and a per-question clock.

    A correct answer scores ``100 + round(time_left / limit * 50)``. A wrong
    answer or a timeout costs one life. The run ends after the last question
    or when no lives remain; it is mastered if any lives are left.
    """

    def __init__(self,
                 questions: Sequence[QuizQuestion],
                 lives: int = QUIZ_LIVES,
                 time_limit: int = QUESTION_TIME_LIMIT):
        if not questions:
            raise ValueError("QuizSession needs at least one question")
        self.questions = list(questions)
        self.max_lives = lives
        self.time_limit = time_limit
        self.reset()

    def reset(self) -> None:
        self.index = 0
        self.lives = self.max_lives
        self.score = 0
        self.finished = False
        self.answers: list = []

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        return None if self.finished else self.questions[self.index]

    @property
    def mastered(self) -> bool:
        return self.lives > 0

    def answer(self, option: int, time_left: float) -> bool:
        """Submit an option index with the seconds left on the clock."""
        question = self._require_active()
        correct = option == question.correct_answer
        if correct:
            remaining = clamp(time_left, 0, self.time_limit)
            self.score += QUIZ_CORRECT_POINTS + round_half_up(remaining / self.time_limit * QUIZ_TIME_BONUS)
        else:
            self.lives = max(0, self.lives - 1)
        self.answers.append((question.id, option, correct))
        logger.debug("Quiz %s answered %s (correct=%s, lives=%d)", question.id, option, correct, self.lives)
        self._advance()
        return correct

    def time_out(self) -> None:
        """The clock ran out before an answer was given."""
        question = self._require_active()
        self.lives = max(0, self.lives - 1)
        self.answers.append((question.id, None, False))
        self._advance()

    def _require_active(self) -> QuizQuestion:
        if self.finished:
            raise SessionStateError("Quiz is already finished")
        return self.questions[self.index]

    def _advance(self) -> None:
        if self.lives == 0 or self.index >= len(self.questions) - 1:
            self.finished = True
            logger.info("Quiz finished: score=%d lives=%d mastered=%s", self.score, self.lives, self.mastered)
        else:
            self.index += 1
