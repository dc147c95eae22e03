import asyncio
import threading

import pytest

from skillsynth.assessment import (
    AdaptiveContentService, AssessmentSessionController, InterviewTurn, SessionMetrics,
    SessionState, StepOutcome, FALLBACK_FEEDBACK
)
from skillsynth.assessment.testing import MockContentService, MockLLMClient, MockMediaDevices
from skillsynth.errors import SessionStateError


def make_controller(content, devices, **kwargs):
    kwargs.setdefault("settle_delay", 0)
    kwargs.setdefault("sampler_interval", 0.001)
    return AssessmentSessionController(content, devices, **kwargs)


async def wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_full_audit_asks_five_questions_and_scores_once():
    devices = MockMediaDevices(answers=[f"answer {i}" for i in range(5)])
    content = MockContentService(questions=[f"Q{i}" for i in range(5)])
    controller = make_controller(content, devices, grade=7, past_questions=["Old question?"])

    assert await controller.initialize_session()
    assert controller.state == SessionState.ACTIVE
    assert controller.current_question == "Q0"

    outcomes = []
    for _ in range(5):
        controller.start_recording()
        outcomes.append(await controller.stop_recording_and_advance())

    assert outcomes == [StepOutcome.ADVANCED] * 4 + [StepOutcome.COMPLETED]
    assert controller.state == SessionState.REPORT
    assert [call["step"] for call in content.question_calls] == [0, 1, 2, 3, 4]
    assert all(call["grade"] == 7 for call in content.question_calls)
    assert content.question_calls[0]["past_questions"] == ["Old question?"]
    assert content.question_calls[0]["history"] == []
    assert len(content.score_calls) == 1
    assert content.score_calls[0][0] == InterviewTurn("Q0", "answer 0")
    assert len(content.score_calls[0]) == 5


@pytest.mark.asyncio
async def test_hardware_released_once_when_report_reached():
    devices = MockMediaDevices(answers=["hello there"])
    controller = make_controller(MockContentService(), devices, daily_task=True)

    await controller.initialize_session()
    controller.start_recording()
    assert await controller.stop_recording_and_advance() == StepOutcome.COMPLETED

    assert len(devices.created) == 4
    assert all(resource.close_count == 1 for resource in devices.created)
    controller.close()
    assert all(resource.close_count == 1 for resource in devices.created)


@pytest.mark.asyncio
async def test_complete_session_returns_scores_and_questions():
    devices = MockMediaDevices(answers=["I would say hi"])
    content = MockContentService(questions=["How do you greet a new student?"])
    controller = make_controller(content, devices, daily_task=True)

    await controller.initialize_session()
    controller.start_recording()
    await controller.stop_recording_and_advance()
    result = controller.complete_session()

    assert result.daily_task is True
    assert result.questions == ["How do you greet a new student?"]
    assert result.scores == FALLBACK_FEEDBACK.scores


@pytest.mark.asyncio
async def test_empty_transcript_is_rejected_in_place():
    devices = MockMediaDevices(answers=["", "   ", "Now I answered"])
    content = MockContentService(questions=["Only question?"])
    controller = make_controller(content, devices, daily_task=True)
    await controller.initialize_session()

    controller.start_recording()
    assert await controller.stop_recording_and_advance() == StepOutcome.RETRY
    assert controller.turns == []
    assert controller.current_step == 0
    assert controller.current_question == "Only question?"
    assert controller.notice

    controller.start_recording()
    assert await controller.stop_recording_and_advance() == StepOutcome.RETRY

    controller.start_recording()
    assert await controller.stop_recording_and_advance() == StepOutcome.COMPLETED
    assert controller.turns == [InterviewTurn("Only question?", "Now I answered")]
    assert len(content.question_calls) == 1


@pytest.mark.asyncio
async def test_scoring_failure_reaches_report_with_fallback():
    llm = MockLLMClient(['"What makes a good friend?"', RuntimeError("Vertex REST error 500")])
    devices = MockMediaDevices(answers=["Someone who listens"])
    controller = make_controller(AdaptiveContentService(llm), devices, daily_task=True)

    await controller.initialize_session()
    assert controller.current_question == "What makes a good friend?"
    controller.start_recording()

    assert await controller.stop_recording_and_advance() == StepOutcome.COMPLETED
    assert controller.state == SessionState.REPORT
    assert controller.feedback.is_fallback
    assert controller.feedback.scores == FALLBACK_FEEDBACK.scores


@pytest.mark.asyncio
async def test_abort_is_idempotent_and_releases_each_resource_once():
    devices = MockMediaDevices(answers=["partial answer"])
    controller = make_controller(MockContentService(), devices)
    await controller.initialize_session()
    controller.start_recording()
    await asyncio.sleep(0.01)
    assert controller.sampler.is_running

    controller.abort()
    controller.abort()
    controller.close()

    assert controller.state == SessionState.ABORTED
    assert not controller.sampler.is_running
    assert controller.sampler.cancellations == 1
    assert all(resource.close_count == 1 for resource in devices.created)
    with pytest.raises(SessionStateError):
        controller.start_recording()


@pytest.mark.asyncio
async def test_abort_while_question_loading_discards_reply():
    devices = MockMediaDevices()
    content = MockContentService(questions=["Too late?"])
    content.hold = asyncio.Event()
    controller = make_controller(content, devices)

    task = asyncio.create_task(controller.initialize_session())
    await wait_for(lambda: content.question_calls)
    assert controller.is_synthesizing

    controller.abort()
    content.hold.set()

    assert await task is False
    assert controller.current_question is None
    assert controller.state == SessionState.ABORTED
    assert all(resource.close_count == 1 for resource in devices.created)


@pytest.mark.asyncio
async def test_abort_during_scoring_discards_feedback(sample_feedback):
    devices = MockMediaDevices(answers=["my answer"])
    content = MockContentService(feedback=sample_feedback)
    controller = make_controller(content, devices, daily_task=True)
    await controller.initialize_session()
    controller.start_recording()

    content.hold = asyncio.Event()
    task = asyncio.create_task(controller.stop_recording_and_advance())
    await wait_for(lambda: content.score_calls)
    assert controller.state == SessionState.PROCESSING

    controller.abort()
    content.hold.set()

    assert await task == StepOutcome.ABORTED
    assert controller.feedback is None
    with pytest.raises(SessionStateError):
        controller.complete_session()


@pytest.mark.asyncio
async def test_start_recording_refused_while_synthesizing():
    content = MockContentService()
    content.hold = asyncio.Event()
    controller = make_controller(content, MockMediaDevices())

    task = asyncio.create_task(controller.initialize_session())
    await wait_for(lambda: content.question_calls)
    with pytest.raises(SessionStateError):
        controller.start_recording()

    content.hold.set()
    assert await task is True
    controller.start_recording()
    assert controller.is_recording
    controller.abort()


@pytest.mark.asyncio
async def test_denied_camera_stays_in_intro_and_releases_microphone():
    devices = MockMediaDevices(fail_on="camera")
    metrics = SessionMetrics()
    controller = make_controller(MockContentService(), devices)
    controller.event_bus.subscribe_all(metrics.handle_event)

    assert await controller.initialize_session() is False
    assert controller.state == SessionState.INTRO
    assert controller.error_message
    assert {r.name for r in devices.created} == {"microphone", "analyser"}
    assert all(resource.close_count == 1 for resource in devices.created)
    assert metrics.get_metrics()["errors_occurred"] == 1


@pytest.mark.asyncio
async def test_context_exit_before_report_aborts():
    devices = MockMediaDevices()
    async with make_controller(MockContentService(), devices) as controller:
        await controller.initialize_session()
    assert controller.state == SessionState.ABORTED
    assert all(resource.close_count == 1 for resource in devices.created)


@pytest.mark.asyncio
async def test_typed_answer_without_recognizer():
    devices = MockMediaDevices(with_recognizer=False)
    controller = make_controller(MockContentService(), devices, daily_task=True)
    await controller.initialize_session()
    assert controller.hardware.recognizer is None

    controller.start_recording()
    controller.handle_recognition_result("I typed this", True)
    assert await controller.stop_recording_and_advance() == StepOutcome.COMPLETED
    assert controller.turns[0].answer == "I typed this"


@pytest.mark.asyncio
async def test_results_after_abort_are_ignored():
    controller = make_controller(MockContentService(), MockMediaDevices())
    await controller.initialize_session()
    controller.start_recording()
    controller.abort()

    controller.handle_recognition_result("late words", True)
    await asyncio.sleep(0)
    assert controller.transcript == ""


@pytest.mark.asyncio
async def test_events_counted_through_a_session():
    devices = MockMediaDevices(answers=["", "an answer"])
    metrics = SessionMetrics()
    controller = make_controller(MockContentService(), devices, daily_task=True)
    controller.event_bus.subscribe_all(metrics.handle_event)

    await controller.initialize_session()
    for _ in range(2):
        controller.start_recording()
        await controller.stop_recording_and_advance()

    snapshot = metrics.get_metrics()
    assert snapshot["sessions_started"] == 1
    assert snapshot["empty_answers"] == 1
    assert snapshot["total_turns"] == 1
    assert snapshot["scoring_requests"] == 1
    assert snapshot["sessions_completed"] == 1
    assert snapshot["fallback_reports"] == 1


class SlowCameraDevices(MockMediaDevices):
    """Camera opening blocks until the test lets it through."""

    def __init__(self):
        super().__init__()
        self.camera_requested = threading.Event()
        self.camera_allowed = threading.Event()

    def open_camera(self):
        self.camera_requested.set()
        self.camera_allowed.wait(5)
        return super().open_camera()


@pytest.mark.asyncio
async def test_cancel_while_devices_open_releases_them():
    devices = SlowCameraDevices()
    controller = make_controller(MockContentService(), devices)

    task = asyncio.create_task(controller.initialize_session())
    await wait_for(devices.camera_requested.is_set)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    controller.close()

    devices.camera_allowed.set()
    await wait_for(lambda: len(devices.created) == 4 and all(r.closed for r in devices.created))

    assert all(resource.close_count == 1 for resource in devices.created)
    assert not controller.hardware.acquired
    assert controller.state == SessionState.ABORTED


@pytest.mark.asyncio
async def test_abort_while_devices_open_releases_them():
    devices = SlowCameraDevices()
    controller = make_controller(MockContentService(), devices)

    task = asyncio.create_task(controller.initialize_session())
    await wait_for(devices.camera_requested.is_set)
    controller.abort()
    devices.camera_allowed.set()

    assert await task is False
    assert len(devices.created) == 4
    assert all(resource.close_count == 1 for resource in devices.created)
    assert controller.sampler is None
