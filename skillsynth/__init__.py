"""
SkillSynth: soft-skills coaching for school students.

Lessons adapted to the student's grade, AI-mediated spoken assessments with
live speech recognition, and a learner profile that teachers can import into
a class roster.
"""

__version__ = "1.0.0"

# Main entry points
from .assessment import AssessmentSessionController, AdaptiveContentService, SessionResult
from .profiles import ProfileStore, ClassRoster, UserProfile

__all__ = [
    "AssessmentSessionController",
    "AdaptiveContentService",
    "SessionResult",
    "ProfileStore",
    "ClassRoster",
    "UserProfile",
]
