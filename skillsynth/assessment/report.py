"""
Fixed-layout text report for a finished assessment.
"""
import logging
import os
import re
import textwrap
from datetime import date
from typing import List, Sequence

from ..config import SKILL_DIMENSIONS
from .models import FeedbackItem, SessionFeedback

logger = logging.getLogger("report")

PAGE_WIDTH = 72
BAR_WIDTH = 40

SKILL_LABELS = {
    "communication": "Communication",
    "confidence": "Confidence",
    "teamwork": "Teamwork",
    "problem_solving": "Problem Solving",
}
BIOMETRIC_LABELS = {
    "eye_contact": "Eye Contact",
    "voice_modulation": "Voice Modulation",
    "facial_expression": "Facial Expression",
}


def _bar(value: int) -> str:
    filled = int(round(BAR_WIDTH * max(0, min(100, value)) / 100))
    return "[" + "#" * filled + "." * (BAR_WIDTH - filled) + "]"


def _heading(title: str) -> List[str]:
    return ["", title.upper(), "-" * len(title)]


def _item_lines(items: Sequence[FeedbackItem]) -> List[str]:
    lines = []
    for item in items:
        lines.append(f"  * {item.title}")
        if item.description:
            lines.extend(textwrap.wrap(item.description, PAGE_WIDTH - 6,
                                       initial_indent="      - ", subsequent_indent="        "))
    return lines or ["  (none)"]


def render_report(feedback: SessionFeedback, profile, day: date) -> str:
    """
    Render the report for ``profile`` (anything with ``name`` and
    ``class_section``) as plain text, PAGE_WIDTH columns wide.
    """
    vision = feedback.ai_vision.upper()
    title = "SkillSynth Jr"
    lines = [
        "=" * PAGE_WIDTH,
        title + vision.rjust(max(len(vision) + 1, PAGE_WIDTH - len(title))),
        "NEURAL SOFT SKILL DNA REPORT",
        "=" * PAGE_WIDTH,
    ]

    lines += _heading("Student Profile")
    lines.append(f"{'Name: ' + profile.name:<40}Grade Level: {profile.class_section}")
    lines.append(f"{'Date: ' + day.isoformat():<40}Session: Skill Audit Alpha")

    lines += _heading("Neural Skill Breakdown")
    for dim in SKILL_DIMENSIONS:
        value = feedback.scores.get(dim, 0)
        lines.append(f"{SKILL_LABELS[dim]:<18}{_bar(value)} {value:>3}%")

    if feedback.biometrics:
        lines += _heading("Presence Signals")
        for key, label in BIOMETRIC_LABELS.items():
            if key in feedback.biometrics:
                lines.append(f"{label:<18}{feedback.biometrics[key]:>3}%")

    lines += _heading("AI Coach Summary")
    lines.extend(textwrap.wrap(f'"{feedback.feedback}"', PAGE_WIDTH - 2,
                               initial_indent="  ", subsequent_indent="  "))

    lines += _heading("Superpowers (Strengths)")
    lines += _item_lines(feedback.strengths)

    lines += _heading("Growth Path (Improvement)")
    lines += _item_lines(feedback.improvement_areas)

    if feedback.vocal_dynamics:
        lines += _heading("Vocal Dynamics")
        for label, text in feedback.vocal_dynamics.items():
            lines.extend(textwrap.wrap(f"{label}: {text}", PAGE_WIDTH - 2,
                                       initial_indent="  ", subsequent_indent="    "))

    if feedback.growth_roadmap:
        lines += _heading("Growth Roadmap")
        for idx, step in enumerate(feedback.growth_roadmap, 1):
            lines.extend(textwrap.wrap(step, PAGE_WIDTH - 6,
                                       initial_indent=f"  {idx}. ", subsequent_indent="     "))

    lines += ["", "=" * PAGE_WIDTH,
              "Verified by SkillSynth AI Assessment Engine".center(PAGE_WIDTH).rstrip()]
    return "\n".join(lines) + "\n"


def report_filename(name: str) -> str:
    safe_name = re.sub(r"\s+", "_", name.strip())
    return f"SkillSynth_Report_{safe_name}.txt"


def export_report(path: str, feedback: SessionFeedback, profile, day: date) -> str:
    """
    Write the report to ``path``. A directory path gets the default
    ``SkillSynth_Report_<name>.txt`` file name. Returns the file written.
    """
    if os.path.isdir(path):
        path = os.path.join(path, report_filename(profile.name))
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_report(feedback, profile, day))
    logger.info("Report written to %s", path)
    return path
