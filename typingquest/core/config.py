"""Tunable constants for layout detection and lesson generation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class DetectionConfig:
    """Thresholds used by the layout detector.

    ``score_threshold`` is how many of the ten home-row positions must line
    up before a scored match is accepted. It is a heuristic; tune it here
    rather than at the call sites.
    """

    min_partial_length: int = 8
    min_scoring_length: int = 10
    score_threshold: int = 8


@dataclass(frozen=True)
class LessonConfig:
    """Sizes, ratios and pass thresholds for generated lessons."""

    word_limit: int = 100
    secondary_word_limit: int = 50
    min_word_length: int = 2
    new_key_ratio: float = 0.7
    quiz_size: int = 8
    min_exercises: int = 6
    drill_stage_limit: int = 3

    base_wpm: int = 10
    wpm_step: int = 2
    max_wpm: int = 40
    base_accuracy: int = 80
    accuracy_step: int = 1
    max_accuracy: int = 95
