"""
Event-driven notifications for assessment sessions.
"""
import logging
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of session events."""
    SESSION_STARTED = "session_started"
    QUESTION_LOADED = "question_loaded"
    RECORDING_STARTED = "recording_started"
    TURN_RECORDED = "turn_recorded"
    EMPTY_ANSWER_REJECTED = "empty_answer_rejected"
    SCORING_REQUESTED = "scoring_requested"
    SESSION_COMPLETED = "session_completed"
    SESSION_ABORTED = "session_aborted"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class SessionEvent(ABC):
    """Base class for all session events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class SessionStartedEvent(SessionEvent):
    def __init__(self, session_id: str, timestamp: float, total_steps: int, daily_task: bool):
        super().__init__(
            event_type=EventType.SESSION_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"total_steps": total_steps, "daily_task": daily_task}
        )


@dataclass
class QuestionLoadedEvent(SessionEvent):
    """Fired when the next question is ready to be answered."""
    def __init__(self, session_id: str, timestamp: float, step: int, question: str):
        super().__init__(
            event_type=EventType.QUESTION_LOADED,
            session_id=session_id,
            timestamp=timestamp,
            data={"step": step, "question": question}
        )


@dataclass
class RecordingStartedEvent(SessionEvent):
    def __init__(self, session_id: str, timestamp: float, step: int):
        super().__init__(
            event_type=EventType.RECORDING_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"step": step}
        )


@dataclass
class TurnRecordedEvent(SessionEvent):
    """Fired when an answer is accepted into the session history."""
    def __init__(self, session_id: str, timestamp: float, step: int, question: str, answer: str):
        super().__init__(
            event_type=EventType.TURN_RECORDED,
            session_id=session_id,
            timestamp=timestamp,
            data={"step": step, "question": question, "answer": answer}
        )


@dataclass
class EmptyAnswerRejectedEvent(SessionEvent):
    def __init__(self, session_id: str, timestamp: float, step: int):
        super().__init__(
            event_type=EventType.EMPTY_ANSWER_REJECTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"step": step}
        )


@dataclass
class ScoringRequestedEvent(SessionEvent):
    def __init__(self, session_id: str, timestamp: float, turn_count: int):
        super().__init__(
            event_type=EventType.SCORING_REQUESTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"turn_count": turn_count}
        )


@dataclass
class SessionCompletedEvent(SessionEvent):
    """Fired when feedback is available and the report can be shown."""
    def __init__(self, session_id: str, timestamp: float, scores: Dict[str, int], used_fallback: bool):
        super().__init__(
            event_type=EventType.SESSION_COMPLETED,
            session_id=session_id,
            timestamp=timestamp,
            data={"scores": scores, "used_fallback": used_fallback}
        )


@dataclass
class SessionAbortedEvent(SessionEvent):
    def __init__(self, session_id: str, timestamp: float, state: str, turn_count: int):
        super().__init__(
            event_type=EventType.SESSION_ABORTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"state": state, "turn_count": turn_count}
        )


@dataclass
class ErrorOccurredEvent(SessionEvent):
    """Fired when an error occurs."""
    def __init__(self, session_id: str, timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[SessionEvent], None]


class SessionEventBus:
    """Event bus for assessment session communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: SessionEvent) -> None:
        """
        Emit an event to all subscribers. Handler errors are logged and
        never reach the emitter.
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_id}")

        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.logger.setLevel(log_level)

    def handle_event(self, event: SessionEvent) -> None:
        self.logger.info(f"Event: {event.event_type} | Session: {event.session_id} | Data: {event.data}")


class SessionMetrics:
    """Collects counters from session events."""

    _COUNTERS = {
        EventType.SESSION_STARTED: "sessions_started",
        EventType.SESSION_COMPLETED: "sessions_completed",
        EventType.SESSION_ABORTED: "sessions_aborted",
        EventType.TURN_RECORDED: "total_turns",
        EventType.EMPTY_ANSWER_REJECTED: "empty_answers",
        EventType.SCORING_REQUESTED: "scoring_requests",
        EventType.ERROR_OCCURRED: "errors_occurred",
    }

    def __init__(self):
        self.reset()

    def handle_event(self, event: SessionEvent) -> None:
        """Update metrics based on event."""
        name = self._COUNTERS.get(event.event_type)
        if name:
            setattr(self, name, getattr(self, name) + 1)
        if event.event_type == EventType.SESSION_COMPLETED and event.data.get("used_fallback"):
            self.fallback_reports += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        snapshot = {name: getattr(self, name) for name in self._COUNTERS.values()}
        snapshot["fallback_reports"] = self.fallback_reports
        return snapshot

    def reset(self) -> None:
        for name in self._COUNTERS.values():
            setattr(self, name, 0)
        self.fallback_reports = 0
