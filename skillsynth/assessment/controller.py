"""
Assessment session controller.

Drives one spoken assessment through INTRO -> ACTIVE -> PROCESSING -> REPORT:
acquire devices, ask questions, record answers, score the transcript. A
session can be aborted at any point; once aborted, every pending
collaborator reply is dropped on arrival and the devices are released.
"""
import asyncio
import logging
import time
import uuid
from typing import List, Optional, Sequence

from ..config import (
    DEFAULT_GRADE, FULL_AUDIT_STEPS, DAILY_TASK_STEPS, SETTLE_DELAY_SECONDS,
    LANGUAGE_CODE, SAMPLER_INTERVAL_SECONDS
)
from ..errors import HardwareUnavailableError, SessionStateError
from ..utils.numbers import coerce_score
from .events import (
    SessionEventBus, SessionStartedEvent, QuestionLoadedEvent, RecordingStartedEvent,
    TurnRecordedEvent, EmptyAnswerRejectedEvent, ScoringRequestedEvent,
    SessionCompletedEvent, SessionAbortedEvent, ErrorOccurredEvent
)
from .hardware import SessionHardware
from .models import BiometricSample, InterviewTurn, SessionFeedback, SessionResult
from .sampling import BiometricSampler
from .schemas import SessionState, StepOutcome

logger = logging.getLogger("session_controller")

HARDWARE_REQUIRED_MESSAGE = "Camera and Microphone access is required for the assessment."
EMPTY_ANSWER_MESSAGE = "We didn't catch that! Try recording your answer again."


class AssessmentSessionController:
    """
    One assessment session, full audit (5 questions) or daily task (1).

    All methods run on the event loop. Speech results arrive on a worker
    thread and are marshalled back with ``call_soon_threadsafe``.
    """

    def __init__(self,
                 content_service,
                 devices,
                 daily_task: bool = False,
                 grade: int = DEFAULT_GRADE,
                 past_questions: Sequence[str] = (),
                 full_audit_steps: int = FULL_AUDIT_STEPS,
                 daily_task_steps: int = DAILY_TASK_STEPS,
                 settle_delay: float = SETTLE_DELAY_SECONDS,
                 language_code: str = LANGUAGE_CODE,
                 sampler_interval: float = SAMPLER_INTERVAL_SECONDS,
                 event_bus: Optional[SessionEventBus] = None,
                 session_id: Optional[str] = None):
        self.content_service = content_service
        self.daily_task = daily_task
        self.grade = grade
        self.past_questions = list(past_questions)
        self.total_steps = daily_task_steps if daily_task else full_audit_steps
        self.settle_delay = settle_delay
        self.sampler_interval = sampler_interval
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.event_bus = event_bus or SessionEventBus()

        self.state = SessionState.INTRO
        self.is_synthesizing = False
        self.is_recording = False
        self.current_question: Optional[str] = None
        self.turns: List[InterviewTurn] = []
        self.transcript = ""
        self.interim_transcript = ""
        self.feedback: Optional[SessionFeedback] = None
        self.error_message: Optional[str] = None
        self.notice: Optional[str] = None

        self.hardware = SessionHardware(devices, self.handle_recognition_result, language_code)
        self.sampler: Optional[BiometricSampler] = None
        self._aborted = False
        self._listening = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # -- properties ---------------------------------------------------------

    @property
    def current_step(self) -> int:
        return len(self.turns)

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def biometrics(self) -> BiometricSample:
        return self.sampler.latest if self.sampler is not None else BiometricSample()

    def _emit(self, event) -> None:
        self.event_bus.emit(event)

    def _require_active(self, action: str) -> None:
        if self._aborted or self.state != SessionState.ACTIVE:
            raise SessionStateError(f"Cannot {action} in state {self.state.value}")

    # -- lifecycle ----------------------------------------------------------

    async def initialize_session(self) -> bool:
        """
        Acquire devices and load the first question.

        Returns:
            True if the session is now ACTIVE, False if devices were
            unavailable (the session stays in INTRO) or it was aborted
        """
        if self._aborted or self.state != SessionState.INTRO:
            raise SessionStateError(f"Cannot initialize in state {self.state.value}")

        self._loop = asyncio.get_running_loop()
        self.error_message = None
        try:
            await asyncio.to_thread(self.hardware.acquire)
        except asyncio.CancelledError:
            # The worker thread keeps opening devices; abort makes it close them
            self.abort()
            raise
        except HardwareUnavailableError as e:
            logger.error("Hardware acquisition failed: %s", e)
            self.error_message = HARDWARE_REQUIRED_MESSAGE
            self._emit(ErrorOccurredEvent(self.session_id, time.time(), type(e).__name__,
                                          str(e), "session_hardware"))
            return False

        if self._aborted:
            # Aborted while devices were opening
            self.hardware.release()
            return False

        self.sampler = BiometricSampler(self.hardware.analyser, self.hardware.camera, self.sampler_interval)
        self.state = SessionState.ACTIVE
        self._emit(SessionStartedEvent(self.session_id, time.time(), self.total_steps, self.daily_task))
        await self.load_next_question([])
        return not self._aborted

    async def load_next_question(self, turns_so_far: Sequence[InterviewTurn]) -> Optional[str]:
        """Ask the content service for the next question; None if aborted meanwhile."""
        self._require_active("load a question")
        self.is_synthesizing = True
        try:
            question = await self.content_service.next_question(
                list(turns_so_far),
                len(turns_so_far),
                self.past_questions,
                self.grade,
                self.total_steps,
            )
        finally:
            self.is_synthesizing = False

        if self._aborted:
            logger.debug("Discarding question that arrived after abort")
            return None

        self.current_question = question
        self._emit(QuestionLoadedEvent(self.session_id, time.time(), self.current_step, question))
        return question

    def start_recording(self) -> None:
        self._require_active("start recording")
        if self.is_synthesizing:
            raise SessionStateError("Cannot start recording while the next question is loading")
        if self.is_recording:
            raise SessionStateError("Already recording")
        if not self.current_question:
            raise SessionStateError("No question to answer")

        self.transcript = ""
        self.interim_transcript = ""
        self.notice = None
        self.is_recording = True
        self._listening = True
        self.hardware.start_listening()
        self.sampler.start()
        self._emit(RecordingStartedEvent(self.session_id, time.time(), self.current_step))

    def handle_recognition_result(self, text: str, is_final: bool) -> None:
        """Speech callback; safe to call from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._apply_recognition, text, is_final)

    def _apply_recognition(self, text: str, is_final: bool) -> None:
        if self._aborted or not self._listening:
            return
        if is_final:
            self.transcript = f"{self.transcript} {text.strip()}".strip()
            self.interim_transcript = ""
        else:
            self.interim_transcript = text

    async def stop_recording_and_advance(self) -> StepOutcome:
        """
        Stop recording, let late speech results settle, then act on the answer.

        Returns:
            RETRY if nothing was heard, ADVANCED when the next question is
            loaded, COMPLETED when the report is ready, ABORTED if the session
            was aborted while waiting
        """
        self._require_active("stop recording")
        if not self.is_recording:
            raise SessionStateError("Not recording")

        self.is_recording = False
        self.hardware.stop_listening()
        self.sampler.stop()

        await asyncio.sleep(self.settle_delay)
        self._listening = False
        if self._aborted:
            return StepOutcome.ABORTED

        answer = self.transcript.strip()
        if not answer:
            self.notice = EMPTY_ANSWER_MESSAGE
            self._emit(EmptyAnswerRejectedEvent(self.session_id, time.time(), self.current_step))
            return StepOutcome.RETRY

        turn = InterviewTurn(self.current_question, answer)
        self.turns.append(turn)
        self._emit(TurnRecordedEvent(self.session_id, time.time(), len(self.turns) - 1,
                                     turn.question, turn.answer))

        if len(self.turns) < self.total_steps:
            self.transcript = ""
            self.interim_transcript = ""
            self.current_question = None
            await self.load_next_question(self.turns)
            return StepOutcome.ABORTED if self._aborted else StepOutcome.ADVANCED

        self.hardware.release()
        self.state = SessionState.PROCESSING
        self._emit(ScoringRequestedEvent(self.session_id, time.time(), len(self.turns)))
        feedback = await self.content_service.score_transcript(list(self.turns))
        if self._aborted:
            logger.debug("Discarding feedback that arrived after abort")
            return StepOutcome.ABORTED

        self.feedback = feedback
        self.state = SessionState.REPORT
        self._emit(SessionCompletedEvent(self.session_id, time.time(), dict(feedback.scores),
                                         feedback.is_fallback))
        return StepOutcome.COMPLETED

    def complete_session(self) -> SessionResult:
        """Hand the finished session's scores and questions to the caller."""
        if self.state != SessionState.REPORT:
            raise SessionStateError(f"Session has no report in state {self.state.value}")
        scores = {dim: coerce_score(value, default=0) for dim, value in self.feedback.scores.items()}
        return SessionResult(
            scores=scores,
            questions=[turn.question for turn in self.turns],
            daily_task=self.daily_task,
            feedback=self.feedback,
        )

    def abort(self) -> None:
        """Stop everything and release devices. Safe to call repeatedly."""
        if self._aborted:
            return
        self._aborted = True
        previous = self.state
        self.is_recording = False
        self._listening = False
        if self.sampler is not None:
            self.sampler.stop()
        self.hardware.release()
        self.state = SessionState.ABORTED
        logger.info("Session %s aborted from %s after %d turns", self.session_id,
                    previous.value, len(self.turns))
        self._emit(SessionAbortedEvent(self.session_id, time.time(), previous.value, len(self.turns)))

    def close(self) -> None:
        """Leave the session view: abort unless a report was reached."""
        if self.state != SessionState.REPORT:
            self.abort()
        else:
            self.hardware.release()

    async def __aenter__(self) -> "AssessmentSessionController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
