"""
Testing infrastructure: mock devices, LLM client and content service.
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from ..config import FFT_SIZE, FRAME_WIDTH, FRAME_HEIGHT
from ..errors import HardwareUnavailableError
from ..infrastructure.llm import extract_json_object
from .models import InterviewTurn, SessionFeedback
from .schemas import fallback_feedback


class _MockResource:
    def __init__(self, name: str):
        self.name = name
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def close(self) -> None:
        self.close_count += 1


class MockMicrophone(_MockResource):
    def __init__(self):
        super().__init__("microphone")


class MockAnalyser(_MockResource):
    """Returns a flat spectrum at a fixed byte level."""

    def __init__(self, level: int = 10):
        super().__init__("analyser")
        self.level = level
        self.frequency_bin_count = FFT_SIZE // 2

    def get_byte_frequency_data(self) -> np.ndarray:
        return np.full(self.frequency_bin_count, self.level, dtype=np.uint8)


class MockCamera(_MockResource):
    """Cycles through the given frames; ``frames=[]`` means no frame yet."""

    def __init__(self, frames: Optional[List[np.ndarray]] = None):
        super().__init__("camera")
        if frames is None:
            frames = [np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), dtype=np.uint8)]
        self.frames = frames
        self.reads = 0

    def read_frame(self) -> Optional[np.ndarray]:
        if not self.frames:
            return None
        frame = self.frames[self.reads % len(self.frames)]
        self.reads += 1
        return frame


class MockRecognizer(_MockResource):
    """
    Speaks the next scripted answer as a final result on each ``start()``.
    An empty string simulates silence.
    """

    def __init__(self, on_result, answers: List[str]):
        super().__init__("recognizer")
        self.on_result = on_result
        self.answers = answers
        self.start_count = 0
        self.stop_count = 0

    def start(self) -> None:
        self.start_count += 1
        if self.answers:
            answer = self.answers.pop(0)
            if answer:
                self.on_result(answer[: len(answer) // 2], False)
                self.on_result(answer, True)

    def stop(self) -> None:
        self.stop_count += 1


class MockMediaDevices:
    """
    Stand-in for MediaDevices recording every resource it hands out.

    ``fail_on`` names a device ("microphone", "camera") whose opening raises
    HardwareUnavailableError, as a denied permission would.
    """

    def __init__(self,
                 answers: Optional[Sequence[str]] = None,
                 fail_on: Optional[str] = None,
                 with_recognizer: bool = True,
                 frames: Optional[List[np.ndarray]] = None,
                 level: int = 10):
        self.answers = list(answers or [])
        self.fail_on = fail_on
        self.with_recognizer = with_recognizer
        self.frames = frames
        self.level = level
        self.created: List[_MockResource] = []

    def _track(self, resource):
        self.created.append(resource)
        return resource

    def open_microphone(self):
        if self.fail_on == "microphone":
            raise HardwareUnavailableError("Microphone permission denied")
        return self._track(MockMicrophone())

    def create_analyser(self, microphone):
        return self._track(MockAnalyser(self.level))

    def open_camera(self):
        if self.fail_on == "camera":
            raise HardwareUnavailableError("Camera permission denied")
        return self._track(MockCamera(self.frames))

    def create_recognizer(self, microphone, on_result, language_code: str = "en-US"):
        if not self.with_recognizer:
            return None
        return self._track(MockRecognizer(on_result, self.answers))

    def resource(self, name: str):
        for resource in self.created:
            if resource.name == name:
                return resource
        return None


class MockLLMClient:
    """Mock LLM client; an Exception in ``mock_responses`` is raised instead."""

    def __init__(self, mock_responses: List[Union[str, Exception]]):
        self.mock_responses = mock_responses
        self.current_response_idx = 0
        self.request_history: List[Dict[str, Any]] = []

    def generate_content(self, prompt_text: str, temperature: float = 0.0, **kwargs) -> str:
        self.request_history.append({
            "prompt": prompt_text,
            "temperature": temperature,
            "kwargs": kwargs
        })

        if self.current_response_idx >= len(self.mock_responses):
            raise RuntimeError("MockLLMClient ran out of responses")
        response = self.mock_responses[self.current_response_idx]
        self.current_response_idx += 1
        if isinstance(response, Exception):
            raise response
        return response

    def generate_json(self, prompt: str, system_instruction: Optional[str] = None,
                      temperature: float = 0.0, model: Optional[str] = None) -> Dict[str, Any]:
        text = self.generate_content(prompt, temperature=temperature,
                                     system_instruction=system_instruction, model=model)
        return extract_json_object(text)


class MockContentService:
    """
    Scripted content service for controller tests.

    Setting ``hold`` makes question and scoring calls wait until the event is
    set, so a test can abort while a reply is outstanding.
    """

    def __init__(self,
                 questions: Optional[Sequence[str]] = None,
                 feedback: Optional[SessionFeedback] = None):
        self.questions = list(questions or [])
        self.feedback = feedback or fallback_feedback()
        self.question_calls: List[Dict[str, Any]] = []
        self.score_calls: List[List[InterviewTurn]] = []
        self.hold: Optional[asyncio.Event] = None

    async def next_question(self, history, step, past_questions=(), grade=8, total_steps=5) -> str:
        self.question_calls.append({
            "history": list(history),
            "step": step,
            "past_questions": list(past_questions),
            "grade": grade,
            "total_steps": total_steps,
        })
        if self.hold is not None:
            await self.hold.wait()
        if self.questions:
            return self.questions.pop(0)
        return f"Question {step + 1}?"

    async def score_transcript(self, history) -> SessionFeedback:
        self.score_calls.append(list(history))
        if self.hold is not None:
            await self.hold.wait()
        return self.feedback
