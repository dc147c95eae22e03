"""
Spoken assessment sessions: controller, content service, telemetry and reports.
"""

from .models import InterviewTurn, BiometricSample, FeedbackItem, SessionFeedback, SessionResult
from .schemas import SessionState, StepOutcome, FALLBACK_FEEDBACK, fallback_feedback, parse_feedback
from .events import (
    EventType, SessionEvent, SessionEventBus, EventLogger, SessionMetrics
)
from .content_service import AdaptiveContentService, parse_grade
from .hardware import SessionHardware
from .sampling import BiometricSampler
from .controller import AssessmentSessionController
from .report import render_report, export_report, report_filename

__all__ = [
    "InterviewTurn", "BiometricSample", "FeedbackItem", "SessionFeedback", "SessionResult",
    "SessionState", "StepOutcome", "FALLBACK_FEEDBACK", "fallback_feedback", "parse_feedback",
    "EventType", "SessionEvent", "SessionEventBus", "EventLogger", "SessionMetrics",
    "AdaptiveContentService", "parse_grade",
    "SessionHardware", "BiometricSampler", "AssessmentSessionController",
    "render_report", "export_report", "report_filename",
]
