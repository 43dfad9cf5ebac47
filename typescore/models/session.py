"""Typing session state machine and its timing record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from typescore.utils.words import count_words


class InvalidTransitionError(RuntimeError):
    """Raised when an event is not allowed in the current session status."""


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class SessionTiming:
    """Start, per-boundary completion and end timestamps of one session.

    ``section_marks[k]`` is the moment the typed word count first reached the
    k-th section boundary, or None while it has not.
    """
    started_at: Optional[datetime] = None
    section_marks: List[Optional[datetime]] = field(default_factory=list)
    ended_at: Optional[datetime] = None

    def latest(self) -> Optional[datetime]:
        recorded = [t for t in (self.started_at, *self.section_marks, self.ended_at) if t is not None]
        return max(recorded) if recorded else None

    def section_spans(self, count: int) -> List[Tuple[Optional[datetime], Optional[datetime]]]:
        """Return (start, completion) for ``count`` consecutive sections.

        A section whose boundary was never reached completes at session end;
        the last section always does.
        """
        completions: List[Optional[datetime]] = []
        for idx in range(count - 1):
            mark = self.section_marks[idx] if idx < len(self.section_marks) else None
            completions.append(mark or self.ended_at)
        completions.append(self.ended_at)
        starts = [self.started_at] + completions[:-1]
        return list(zip(starts, completions))


@dataclass
class SessionState:
    """Explicit typing-session state driven by keystroke/finish/reset events."""

    reference_text: str
    thresholds: List[int] = field(default_factory=list)
    input_text: str = ""
    status: SessionStatus = SessionStatus.NOT_STARTED
    timing: SessionTiming = field(default_factory=SessionTiming)

    def __post_init__(self):
        missing = len(self.thresholds) - len(self.timing.section_marks)
        if missing > 0:
            self.timing.section_marks.extend([None] * missing)

    @property
    def is_finished(self) -> bool:
        return self.status is SessionStatus.FINISHED

    def keystroke(self, text: str, now: datetime) -> None:
        """Record the full input text after a change."""
        if self.is_finished:
            raise InvalidTransitionError("Session is finished; input is frozen")
        if self.status is SessionStatus.NOT_STARTED:
            if not text:
                return
            self.timing.started_at = self._stamp(now)
            self.status = SessionStatus.IN_PROGRESS

        self.input_text = text
        words = count_words(text)
        for idx, threshold in enumerate(self.thresholds):
            # first crossing wins, even if the count later drops again
            if self.timing.section_marks[idx] is None and words >= threshold:
                self.timing.section_marks[idx] = self._stamp(now)

    def finish(self, now: datetime) -> None:
        if self.is_finished:
            raise InvalidTransitionError("Session already finished")
        self.timing.ended_at = self._stamp(now)
        self.status = SessionStatus.FINISHED

    def reset(self) -> None:
        self.input_text = ""
        self.status = SessionStatus.NOT_STARTED
        self.timing = SessionTiming(section_marks=[None] * len(self.thresholds))

    def _stamp(self, now: datetime) -> datetime:
        latest = self.timing.latest()
        if latest is not None and now < latest:
            return latest
        return now
