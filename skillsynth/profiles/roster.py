"""
Teacher-side class roster built from imported sync codes.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import SKILL_DIMENSIONS
from ..utils.numbers import round_half_up
from .sync_code import decode_sync_code

logger = logging.getLogger("roster")

AT_RISK_PROGRESS = 25


@dataclass
class RosterEntry:
    name: str
    class_section: str
    progress: int
    score: int
    status: str
    scores: Dict[str, int] = field(default_factory=dict)
    streak: Optional[int] = None


class ClassRoster:
    """Students imported into the teacher dashboard, keyed by name."""

    def __init__(self):
        self.entries: List[RosterEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def import_code(self, code: str) -> RosterEntry:
        """
        Decode a student's sync code and add or refresh their row.

        A row with the same name is overwritten in place; otherwise the
        student is appended. Malformed codes raise SyncCodeError and leave
        the roster unchanged.
        """
        payload = decode_sync_code(code)
        scores = payload.scores.as_dict()
        entry = RosterEntry(
            name=payload.name,
            class_section=payload.class_section,
            progress=payload.progress,
            score=round_half_up(sum(scores.values()) / len(scores)),
            status="Completed" if payload.progress == 100 else "Active",
            scores=scores,
            streak=payload.streak,
        )

        for idx, existing in enumerate(self.entries):
            if existing.name == entry.name:
                self.entries[idx] = entry
                logger.info("Updated roster entry for %s", entry.name)
                return entry

        self.entries.append(entry)
        logger.info("Added %s to roster (%d students)", entry.name, len(self.entries))
        return entry

    def average_progress(self) -> int:
        if not self.entries:
            return 0
        return round_half_up(sum(e.progress for e in self.entries) / len(self.entries))

    def at_risk(self) -> List[RosterEntry]:
        return [e for e in self.entries if e.progress < AT_RISK_PROGRESS]

    def dimension_means(self) -> Dict[str, float]:
        if not self.entries:
            return {}
        return {
            dim: sum(e.scores.get(dim, 0) for e in self.entries) / len(self.entries)
            for dim in SKILL_DIMENSIONS
        }

    def top_strength(self) -> Optional[str]:
        """Dimension with the highest class mean; first listed wins ties."""
        means = self.dimension_means()
        if not means:
            return None
        return max(SKILL_DIMENSIONS, key=lambda dim: means[dim])

    def growth_area(self) -> Optional[str]:
        means = self.dimension_means()
        if not means:
            return None
        return min(SKILL_DIMENSIONS, key=lambda dim: means[dim])
