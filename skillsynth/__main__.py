#!/usr/bin/env python3
"""
Main entry point for SkillSynth.
Allows running the package with: python -m skillsynth
"""
import asyncio
import sys
import time
from datetime import date
from typing import List, Optional

from .config import get_config, Config
from .assessment import (
    AdaptiveContentService, AssessmentSessionController, EventLogger, SessionMetrics,
    SessionState, StepOutcome, parse_grade, render_report, export_report
)
from .curriculum import QuizSession, daily_task_for, find_module
from .errors import SyncCodeError
from .infrastructure.data import JsonFileStore
from .infrastructure.llm import VertexRestClient
from .infrastructure.media import MediaDevices
from .profiles import ClassRoster, ProfileStore
from .utils import setup_logging

SKILL_NAMES = {
    "communication": "Communication",
    "confidence": "Confidence",
    "teamwork": "Teamwork",
    "problem_solving": "Problem Solving",
}


def _flag_value(prefix: str) -> Optional[str]:
    for arg in sys.argv[1:]:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return None


def _flag_values(prefix: str) -> List[str]:
    return [arg[len(prefix):] for arg in sys.argv[1:] if arg.startswith(prefix)]


def _llm_client(config: Config) -> VertexRestClient:
    return VertexRestClient(
        project=config.google_cloud_project,
        location=config.vertex_location,
        model=config.model_name,
        credentials_json=config.google_application_credentials,
    )


def run_roster_import(codes: List[str]) -> int:
    """Teacher mode: import sync codes and print the class overview."""
    roster = ClassRoster()
    failures = 0
    for code in codes:
        try:
            entry = roster.import_code(code)
            print(f"✅ Imported {entry.name} (grade {entry.class_section})")
        except SyncCodeError as e:
            failures += 1
            print(f"❌ Invalid DNA Sync Code: {e}")

    if not len(roster):
        return 1

    print("\n📋 Class roster")
    print("=" * 50)
    for entry in roster.entries:
        print(f"{entry.name:<20} {entry.class_section:<6} {entry.progress:>3}%  score {entry.score:>3}  {entry.status}")
    print("=" * 50)
    print(f"Avg. completion: {roster.average_progress()}%")
    print(f"At risk: {', '.join(e.name for e in roster.at_risk()) or 'none'}")
    print(f"Top strength: {SKILL_NAMES[roster.top_strength()]}")
    print(f"Growth area: {SKILL_NAMES[roster.growth_area()]}")
    return 1 if failures else 0


async def run_lesson(config: Config, store: ProfileStore, module_id: str) -> None:
    """Adapt a lesson to the student's grade, run its quiz and record completion."""
    module = find_module(store.curriculum, module_id)
    if module is None:
        print(f"❌ Unknown lesson: {module_id}")
        return

    grade = parse_grade(store.profile.class_section)
    content_service = AdaptiveContentService(_llm_client(config), scoring_model=config.scoring_model_name)
    print(f"⏳ Synthesizing courseware for grade {grade}...")
    lesson = await content_service.adapt_content(module, grade)

    print(f"\n📘 Week {lesson.week}: {lesson.title}\n")
    print(lesson.content)
    for idx, point in enumerate(lesson.learning_points, 1):
        print(f"  {idx}. {point}")
    for example in lesson.examples:
        print(f"  💡 {example}")

    evolved = None
    if lesson.quizzes:
        quiz = QuizSession(lesson.quizzes)
        while not quiz.finished:
            question = quiz.current_question
            print(f"\n❓ {question.question}  ({'❤️ ' * quiz.lives}| {quiz.time_limit}s)")
            for idx, option in enumerate(question.options):
                print(f"   {idx + 1}) {option}")
            started = time.monotonic()
            reply = await asyncio.to_thread(input, "   Your answer: ")
            time_left = quiz.time_limit - (time.monotonic() - started)
            if time_left <= 0:
                print("   ⏰ Time's up!")
                quiz.time_out()
                continue
            choice = int(reply) - 1 if reply.strip().isdigit() else -1
            print("   ✅ Correct!" if quiz.answer(choice, time_left) else "   ❌ Not quite.")

        print(f"\n🏁 Score {quiz.score} | {'Mastery Unlocked!' if quiz.mastered else 'Challenge Failed'}")
        if not quiz.mastered:
            return
        wants_level_2 = await asyncio.to_thread(input, "🚀 Unlock Level 2 for this lesson? [y/N] ")
        if wants_level_2.strip().lower().startswith("y"):
            evolved = await content_service.evolve_content(lesson, grade)
            if evolved is None:
                print("⚠️  Level 2 is not available right now.")

    profile = store.complete_module(module.id, evolved)
    print(f"✅ Lesson complete. Progress {profile.progress}%")


async def run_session(config: Config, store: ProfileStore, daily: bool, report_path: Optional[str]) -> None:
    profile = store.profile
    content_service = AdaptiveContentService(_llm_client(config), scoring_model=config.scoring_model_name)

    controller = AssessmentSessionController(
        content_service,
        MediaDevices(),
        daily_task=daily,
        grade=parse_grade(profile.class_section),
        past_questions=store.past_questions(),
        full_audit_steps=config.full_audit_steps,
        daily_task_steps=config.daily_task_steps,
        settle_delay=config.settle_delay_seconds,
        language_code=config.language_code,
    )
    metrics = SessionMetrics()
    controller.event_bus.subscribe_all(EventLogger().handle_event)
    controller.event_bus.subscribe_all(metrics.handle_event)

    async with controller:
        if daily:
            task = daily_task_for(date.today())
            print(f"📅 Daily task: {task.title}\n   {task.description}")

        print("📷 Requesting camera and microphone...")
        if not await controller.initialize_session():
            print(f"❌ {controller.error_message}")
            return

        while controller.state == SessionState.ACTIVE:
            print(f"\n❓ Question {controller.current_step + 1}/{controller.total_steps}: {controller.current_question}")
            await asyncio.to_thread(input, "   Press Enter to start recording...")
            controller.start_recording()
            if controller.hardware.recognizer is None:
                typed = await asyncio.to_thread(input, "⌨️  Speech recognition is off. Type your answer: ")
                controller.handle_recognition_result(typed, True)
            else:
                await asyncio.to_thread(input, "🎙️  Recording... press Enter when you finish speaking.")
            signals = controller.biometrics
            print(f"   voice {signals.voice} | gaze {signals.gaze} | expression {signals.expression}")

            outcome = await controller.stop_recording_and_advance()
            if outcome == StepOutcome.RETRY:
                print(f"⚠️  {controller.notice}")
            elif outcome == StepOutcome.COMPLETED:
                print("🧠 Analyzing your answers...")

        if controller.state != SessionState.REPORT:
            return

        result = controller.complete_session()
        profile = store.record_assessment(result)
        print()
        print(render_report(result.feedback, profile, date.today()))
        if report_path:
            written = export_report(report_path, result.feedback, profile, date.today())
            print(f"📄 Report saved to {written}")
        print(f"🔥 Streak: {profile.streak} | Overall: {store.overall_score()}")


def main():
    """Command-line interface for SkillSynth."""

    # Teacher roster import needs no cloud configuration
    codes = _flag_values("--import-code=")
    if codes:
        sys.exit(run_roster_import(codes))

    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    log_level = _flag_value("--log-level=") or config.log_level
    log_file = setup_logging(config.log_file, log_level)

    store = ProfileStore(JsonFileStore(config.storage_dir))
    name = _flag_value("--name=")
    if not name:
        name = store.profile.name if store.profile else input("👋 What's your name? ").strip()
    grade = _flag_value("--grade=") or (store.profile.class_section if store.profile else "8")
    profile = store.login(name, grade)
    print(f"👤 {profile.name} | Grade {profile.class_section} | Progress {profile.progress}%")

    if "--export-code" in sys.argv:
        print(f"🧬 DNA sync code:\n{store.export_sync_code()}")
        return

    print(f"📝 Detailed logs: {log_file}")
    lesson_id = _flag_value("--lesson=")
    try:
        if lesson_id:
            asyncio.run(run_lesson(config, store, lesson_id))
        else:
            asyncio.run(run_session(config, store, "--daily" in sys.argv, _flag_value("--report=")))
    except KeyboardInterrupt:
        print("\n👋 Session cancelled.")


if __name__ == "__main__":
    main()
