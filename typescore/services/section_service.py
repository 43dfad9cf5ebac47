"""Overall and per-section speed/accuracy evaluation of a finished typing test."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from typescore import config
from typescore.models.edit_operation import MistakeReport
from typescore.models.session import SessionTiming
from typescore.services.alignment_service import EditAlignmentService
from typescore.services.mistake_classifier import classify
from typescore.time_utils import elapsed_minutes
from typescore.utils.words import count_words, join_words, split_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionResult:
    label: str
    wpm: float
    mistakes: MistakeReport

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.label,
            "wpm": self.wpm,
            "incorrect_spaces": self.mistakes.incorrect_spaces,
            "missing_letters": self.mistakes.missing_letters,
            "typos": self.mistakes.typos,
        }


@dataclass(frozen=True)
class EvaluationReport:
    overall: SectionResult
    sections: Optional[List[SectionResult]] = None

    @property
    def has_sections(self) -> bool:
        return self.sections is not None

    def rows(self) -> List[SectionResult]:
        """Overall result followed by the section results, if any."""
        return [self.overall, *self.sections] if self.has_sections else [self.overall]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.to_dict(),
            "sections": [s.to_dict() for s in self.sections] if self.has_sections else None,
        }


def section_bounds(total_words: int, min_words: int = config.MIN_SECTION_WORDS) -> Optional[List[Tuple[int, int]]]:
    """Word ranges of the Beginning/Middle/End sections, or None for short texts."""
    if total_words < min_words:
        return None
    size = total_words // 3
    return [(0, size), (size, 2 * size), (2 * size, total_words)]


def section_thresholds(total_words: int, min_words: int = config.MIN_SECTION_WORDS) -> List[int]:
    """Cumulative word counts at which the non-final sections are complete."""
    bounds = section_bounds(total_words, min_words)
    if bounds is None:
        return []
    return [stop for _, stop in bounds[:-1]]


def words_per_minute(words: int, minutes: float) -> float:
    if words <= 0:
        return 0.0
    return words / max(minutes, config.MIN_ELAPSED_MINUTES)


def span_wpm(words: int, start: Optional[datetime], end: Optional[datetime]) -> float:
    """WPM over a timed span; 0.0 when the span was never timed."""
    if start is None or end is None:
        return 0.0
    return words_per_minute(words, elapsed_minutes(start, end))


class SectionService:
    """Evaluate a reference/typed pair as a whole and in three word-count sections."""

    def __init__(
        self,
        aligner: Optional[EditAlignmentService] = None,
        min_section_words: int = config.MIN_SECTION_WORDS,
        labels: Optional[List[str]] = None,
    ):
        self._aligner = aligner or EditAlignmentService()
        self._min_section_words = min_section_words
        self._labels = labels or config.SECTION_LABELS

    def mistakes(self, reference: str, typed: str) -> MistakeReport:
        return classify(self._aligner.align(reference, typed))

    def thresholds_for(self, reference: str) -> List[int]:
        return section_thresholds(count_words(reference), self._min_section_words)

    def evaluate(self, reference: str, typed: str, timing: SessionTiming) -> EvaluationReport:
        overall = SectionResult(
            label=config.TOTAL_LABEL,
            wpm=span_wpm(count_words(typed), timing.started_at, timing.ended_at),
            mistakes=self.mistakes(reference, typed),
        )

        ref_words = split_words(reference)
        bounds = section_bounds(len(ref_words), self._min_section_words)
        if bounds is None:
            logger.info(
                "Section breakdown unavailable: %d reference words (< %d).",
                len(ref_words),
                self._min_section_words,
            )
            return EvaluationReport(overall=overall, sections=None)

        typed_words = split_words(typed)
        spans = timing.section_spans(len(bounds))
        sections: List[SectionResult] = []
        for label, (start, stop), (t_start, t_end) in zip(self._labels, bounds, spans):
            typed_slice = typed_words[start:stop]
            sections.append(
                SectionResult(
                    label=label,
                    wpm=span_wpm(len(typed_slice), t_start, t_end),
                    mistakes=self.mistakes(join_words(ref_words[start:stop]), join_words(typed_slice)),
                )
            )
        return EvaluationReport(overall=overall, sections=sections)


_default_service = SectionService()


def evaluate(reference: str, typed: str, timing: SessionTiming) -> EvaluationReport:
    return _default_service.evaluate(reference, typed, timing)
