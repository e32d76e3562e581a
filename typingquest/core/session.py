from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Sequence

from typingquest.core.lessons import GeneratedLesson


@dataclass
class TaskResult:
    """Result of a single exercise submission."""

    accuracy: float
    wpm: float
    cpm: float
    errors: int


class PracticeSession:
    """Walks the exercises of one generated lesson and scores each submission.

    Speed metrics:
      * **CPM** - correct characters per minute.
      * **Gross WPM** - (total characters / 5) / elapsed minutes.
      * **Net WPM** - (total chars - 5 x errors) / 5 / elapsed minutes,
        floored at 0.

    ``passed()`` holds the aggregate net WPM and accuracy against the
    lesson's own ``min_wpm`` and ``min_accuracy``.
    """

    def __init__(self, lesson: GeneratedLesson, clock: Callable[[], float] = time.time) -> None:
        self._lesson = lesson
        self._clock = clock
        self._index = 0
        self._start_time = clock()
        self._total_chars = 0
        self._total_correct = 0
        self._total_errors = 0

    @property
    def lesson(self) -> GeneratedLesson:
        return self._lesson

    @property
    def index(self) -> int:
        """Index of the current exercise (0-based)."""
        return self._index

    @property
    def total_tasks(self) -> int:
        return len(self._lesson.exercises)

    def current_task(self) -> str:
        return self._lesson.exercises[self._index]

    def is_complete(self) -> bool:
        return self._index >= len(self._lesson.exercises)

    def submit(self, typed: str) -> TaskResult:
        """Score ``typed`` against the current exercise and advance to the next."""
        if self.is_complete():
            return TaskResult(accuracy=0.0, wpm=0.0, cpm=0.0, errors=0)
        target = self._lesson.exercises[self._index]
        correct = sum(1 for a, b in zip(typed, target) if a == b)
        total = max(len(target), len(typed))
        errors = total - correct
        self._total_chars += total
        self._total_correct += correct
        self._total_errors += errors
        self._index += 1

        return TaskResult(
            accuracy=(correct / total) * 100.0 if total else 0.0,
            wpm=self.aggregate_wpm(),
            cpm=self.aggregate_cpm(),
            errors=errors,
        )

    def _elapsed_minutes(self) -> float:
        return max((self._clock() - self._start_time) / 60.0, 1e-6)

    def aggregate_accuracy(self) -> float:
        total = max(self._total_chars, 1)
        return (self._total_correct / total) * 100.0

    def aggregate_cpm(self) -> float:
        return self._total_correct / self._elapsed_minutes()

    def aggregate_wpm(self) -> float:
        """Net WPM (error-adjusted)."""
        return max(0.0, (self._total_chars - 5 * self._total_errors) / 5.0 / self._elapsed_minutes())

    def aggregate_gross_wpm(self) -> float:
        return (self._total_chars / 5.0) / self._elapsed_minutes()

    def aggregate_errors(self) -> int:
        return self._total_errors

    def passed(self) -> bool:
        if self._total_chars == 0:
            return False
        return (
            self.aggregate_wpm() >= self._lesson.min_wpm
            and self.aggregate_accuracy() >= self._lesson.min_accuracy
        )


def quiz_accuracy(lesson: GeneratedLesson, typed_words: Sequence[str]) -> float:
    """Percentage of quiz words typed exactly, position by position."""
    if not lesson.quiz_words:
        return 0.0
    correct = sum(1 for expected, typed in zip(lesson.quiz_words, typed_words) if expected == typed.strip())
    return correct / len(lesson.quiz_words) * 100.0


def quiz_passed(lesson: GeneratedLesson, typed_words: Sequence[str]) -> bool:
    return quiz_accuracy(lesson, typed_words) >= lesson.min_accuracy
