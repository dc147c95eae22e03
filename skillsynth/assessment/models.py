"""
Data models for assessment sessions.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class InterviewTurn:
    """One answered question."""
    question: str
    answer: str


@dataclass
class BiometricSample:
    """Live engagement proxies shown while recording, each 0-100."""
    voice: int = 0
    gaze: int = 0
    expression: int = 0


@dataclass
class FeedbackItem:
    title: str
    description: str = ""


@dataclass
class SessionFeedback:
    """Coach feedback for a finished session."""
    feedback: str
    scores: Dict[str, int]
    biometrics: Dict[str, int] = field(default_factory=dict)
    strengths: List[FeedbackItem] = field(default_factory=list)
    weaknesses: List[FeedbackItem] = field(default_factory=list)
    improvement_areas: List[FeedbackItem] = field(default_factory=list)
    vocal_dynamics: Dict[str, str] = field(default_factory=dict)
    growth_roadmap: List[str] = field(default_factory=list)
    ai_vision: str = ""
    is_fallback: bool = False


@dataclass
class SessionResult:
    """What a completed session hands back for the profile to absorb."""
    scores: Dict[str, int]
    questions: List[str]
    daily_task: bool
    feedback: Optional[SessionFeedback] = None
