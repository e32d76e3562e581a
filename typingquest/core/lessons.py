"""Per-stage lesson assembly: exercises, quiz words and pass thresholds.

Lessons are built from three inputs: the family's key curriculum (which keys
are available at a stage), a word corpus filtered down to what those keys
can type, and, when a target layout is given, the hand-written reference
lesson of the same stage remapped onto that layout.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from itertools import zip_longest
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from typingquest.core.config import LessonConfig
from typingquest.core.corpus import FALLBACK_LANGUAGE, WordCorpusLoader
from typingquest.core.curriculum import CurriculumRepository, KeyProgression, KeyStage
from typingquest.core.levels import LevelRepository, map_level
from typingquest.core.mapper import CharacterMapper
from typingquest.core.word_filter import (
    bucket_by_length,
    deduplicate_words,
    get_valid_words,
    get_words_for_new_keys,
    mix_words,
    pick_random,
    shuffled,
    split_by_new_keys,
)

logger = logging.getLogger(__name__)

# stage name -> (title, description)
LESSON_META: Dict[str, Tuple[str, str]] = {
    "home_row_basic": ("Home Row Introduction", "Learn the foundation of touch typing - the home row position"),
    "home_row_extended": ("Home Row Extended", "Extend your reach with the index fingers"),
    "top_row_vowels": ("Top Row - Vowels", "Reach up with your middle fingers"),
    "top_row_start": ("Top Row Start", "First reaches up to the top row"),
    "top_row_index": ("Top Row - Index Fingers", "Reach up with your index fingers"),
    "top_row_ring": ("Top Row - Ring Fingers", "Ring fingers reach to the top row"),
    "top_row_pinky": ("Top Row - Pinky Fingers", "Challenge your pinkies with top row keys"),
    "top_row_complete": ("Top Row Complete", "Master the remaining top row keys"),
    "bottom_row_start": ("Bottom Row Start", "Reach down with middle and index fingers"),
    "bottom_row_middle_index": ("Bottom Row Start", "Reach down with middle and index fingers"),
    "bottom_row_index": ("Bottom Row - Index Fingers", "Index fingers reach down"),
    "bottom_row_ring": ("Bottom Row - Ring Fingers", "Ring fingers reach down"),
    "bottom_row_pinky": ("Bottom Row - Pinky Fingers", "Pinky fingers complete the bottom row"),
    "complete_keyboard": ("Complete Keyboard", "The last keys and spacebar mastery"),
    "full_practice": ("Full Keyboard Practice", "Master all keys with real words"),
    "speed_building": ("Speed Building", "Push your typing speed with common word patterns"),
    "mastery": ("Typing Mastery", "The final challenge"),
}

LENGTH_TIERS: Dict[str, Tuple[int, Optional[int]]] = {
    "short": (2, 4),
    "medium": (5, 7),
    "long": (8, None),
}
TIER_SIZES = {"short": 10, "medium": 8, "long": 5}
MIXED_SIZE = 15
EMPHASIS_SIZE = 10
PAIR_DRILL_SIZE = 8
PSEUDO_WORD_LENGTH = 4


@dataclass(frozen=True)
class LessonOptions:
    """What to generate lessons for.

    ``layout_id`` is optional; when given (and an authored curriculum is
    wired in) the reference drills are remapped onto that layout and mixed
    into the generated exercises.
    """

    layout_family: str = "qwerty"
    language: str = FALLBACK_LANGUAGE
    mix_secondary: bool = False
    secondary_language: str = FALLBACK_LANGUAGE
    secondary_mix_ratio: float = 0.3
    layout_id: Optional[str] = None

    def cache_key(self) -> Tuple:
        return (
            self.layout_family,
            self.language,
            self.layout_id,
            (self.mix_secondary, self.secondary_language, self.secondary_mix_ratio),
        )


@dataclass(frozen=True)
class GeneratedLesson:
    id: int
    title: str
    description: str
    concept_key: str
    keys: Tuple[str, ...]
    new_keys: Tuple[str, ...]
    exercises: Tuple[str, ...]
    quiz_words: Tuple[str, ...]
    min_wpm: int
    min_accuracy: int


def min_wpm(stage_id: int, config: Optional[LessonConfig] = None) -> int:
    config = config or LessonConfig()
    return min(config.max_wpm, config.base_wpm + (stage_id - 1) * config.wpm_step)


def min_accuracy(stage_id: int, config: Optional[LessonConfig] = None) -> int:
    config = config or LessonConfig()
    return min(config.max_accuracy, config.base_accuracy + (stage_id - 1) * config.accuracy_step)


def home_anchors(progression: KeyProgression) -> Tuple[str, ...]:
    """Index and middle finger home keys (``f j d k`` on QWERTY) for pair drills."""
    first = progression.stages[0].new_keys
    if len(first) >= 6:
        return (first[3], first[4], first[2], first[5])
    return tuple(first)


def _letters(keys: Iterable[str]) -> List[str]:
    return [key for key in keys if key.strip()]


def key_drills(keys: Sequence[str]) -> List[str]:
    """Corpus-free drills built straight from a key set."""
    letters = _letters(keys)
    if not letters:
        return []
    half = math.ceil(len(letters) / 2)
    left, right = letters[:half], letters[half:]

    drills: List[str] = []
    if left and right:
        left_text, right_text = "".join(left), "".join(right)
        drills.append(f"{left_text} {right_text}")
        drills.append(f"{left_text} {right_text} {left_text} {right_text}")

    alternating = []
    for pair in zip_longest(left, right):
        alternating.extend(key for key in pair if key is not None)
    alternating_text = "".join(alternating)
    drills.append(f"{alternating_text} {alternating_text[::-1]}")

    drills.append(" ".join(key * 3 for key in letters))
    return drills


def pseudo_words(keys: Sequence[str], count: int, length: int = PSEUDO_WORD_LENGTH) -> List[str]:
    """Key-concatenation stand-ins for real words, rotating through the key set."""
    letters = _letters(keys)
    if not letters:
        return []
    size = min(length, len(letters))
    return ["".join(letters[(start + i) % len(letters)] for i in range(size)) for start in range(count)]


def fallback_drills(keys: Sequence[str]) -> List[str]:
    drills = key_drills(keys)
    words = pseudo_words(keys, PAIR_DRILL_SIZE)
    if words:
        drills.append(" ".join(words))
    return drills


def interleave(first: Sequence[str], second: Sequence[str]) -> List[str]:
    result: List[str] = []
    for a, b in zip_longest(first, second):
        if a is not None:
            result.append(a)
        if b is not None:
            result.append(b)
    return result


def _key_label(key: str) -> str:
    return "Space" if key == " " else key.upper()


class LessonAssembler:
    """Builds :class:`GeneratedLesson` objects for one lesson family at a time."""

    def __init__(
        self,
        curriculum: CurriculumRepository,
        corpora: WordCorpusLoader,
        mapper: Optional[CharacterMapper] = None,
        levels: Optional[LevelRepository] = None,
        config: Optional[LessonConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if levels is not None and mapper is None:
            raise ValueError("An authored curriculum needs a CharacterMapper to adapt it")
        self._curriculum = curriculum
        self._corpora = corpora
        self._mapper = mapper
        self._levels = levels
        self._config = config or LessonConfig()
        self._rng = rng or random.Random()

    @property
    def config(self) -> LessonConfig:
        return self._config

    def generate_lesson(self, stage_id: int, options: LessonOptions) -> GeneratedLesson:
        progression = self._curriculum.progression(options.layout_family)
        stage = self._curriculum.stage(options.layout_family, stage_id)

        words = self._select_words(stage, options)
        if not words:
            logger.info(
                "No typeable '%s' words for %s stage %d, using key drills",
                options.language,
                options.layout_family,
                stage_id,
            )
        exercises = interleave(
            self._authored_drills(stage_id, options),
            self._build_exercises(stage, words, home_anchors(progression)),
        )
        return self._lesson(stage, exercises, self._select_quiz_words(stage, words))

    def generate_all_lessons(self, options: LessonOptions) -> List[GeneratedLesson]:
        progression = self._curriculum.progression(options.layout_family)
        return [self.generate_lesson(stage.id, options) for stage in progression.stages]

    async def generate_all_lessons_async(self, options: LessonOptions) -> List[GeneratedLesson]:
        """Await the corpus load, then generate every stage."""
        await self._corpora.load_async(options.language)
        if options.mix_secondary:
            await self._corpora.load_async(options.secondary_language)
        return self.generate_all_lessons(options)

    def key_only_lessons(self, options: LessonOptions) -> List[GeneratedLesson]:
        """Lessons built from key sets alone, for showing something before any corpus loads."""
        progression = self._curriculum.progression(options.layout_family)
        anchors = home_anchors(progression)
        lessons = []
        for stage in progression.stages:
            exercises = self._key_practice(stage, anchors) + fallback_drills(stage.cumulative_keys)
            exercises = interleave(self._authored_drills(stage.id, options), exercises)
            quiz_words = pseudo_words(stage.cumulative_keys, self._config.quiz_size)
            lessons.append(self._lesson(stage, exercises, quiz_words))
        return lessons

    def _select_words(self, stage: KeyStage, options: LessonOptions) -> List[str]:
        cfg = self._config
        corpus = self._corpora.load(options.language)
        words = get_words_for_new_keys(
            corpus,
            stage.cumulative_keys,
            stage.new_keys,
            min_length=cfg.min_word_length,
            limit=cfg.word_limit,
            new_key_ratio=cfg.new_key_ratio,
            rng=self._rng,
        )
        if options.mix_secondary and options.secondary_language != options.language:
            secondary = get_valid_words(
                self._corpora.load(options.secondary_language),
                stage.cumulative_keys,
                min_length=cfg.min_word_length,
                limit=cfg.secondary_word_limit,
            )
            words = deduplicate_words(
                mix_words(words, secondary, 1 - options.secondary_mix_ratio, rng=self._rng)
            )
        return words

    def _key_practice(self, stage: KeyStage, anchors: Sequence[str]) -> List[str]:
        """Single-key repetition and key-pair drills for the first few stages."""
        new_letters = _letters(stage.new_keys)
        if stage.id > self._config.drill_stage_limit or not new_letters:
            return []
        drills = [" ".join(key * 5 for key in new_letters)]
        pairs = [f"{key}{anchor} {anchor}{key}" for key in new_letters for anchor in anchors]
        if pairs:
            drills.append(" ".join(pairs[:PAIR_DRILL_SIZE]))
        return drills

    def _build_exercises(self, stage: KeyStage, words: Sequence[str], anchors: Sequence[str]) -> List[str]:
        exercises = self._key_practice(stage, anchors)

        if words:
            buckets = bucket_by_length(words, LENGTH_TIERS)
            for tier, size in TIER_SIZES.items():
                if buckets[tier]:
                    exercises.append(" ".join(pick_random(buckets[tier], size, self._rng)))
            exercises.append(" ".join(pick_random(words, MIXED_SIZE, self._rng)))
            with_new, _ = split_by_new_keys(words, stage.new_keys)
            if with_new:
                exercises.append(" ".join(pick_random(with_new, EMPHASIS_SIZE, self._rng)))
        else:
            exercises.extend(fallback_drills(stage.cumulative_keys))
        return exercises

    def _authored_drills(self, stage_id: int, options: LessonOptions) -> List[str]:
        if self._levels is None or self._mapper is None or options.layout_id is None:
            return []
        lesson_family = self._mapper.registry.lesson_family(options.layout_id)
        if lesson_family != options.layout_family:
            raise ValueError(
                f"Layout {options.layout_id} belongs to lesson family {lesson_family}, "
                f"not {options.layout_family}"
            )
        level = self._levels.by_id(stage_id)
        if level is None:
            return []
        return list(map_level(level, self._mapper, options.layout_id).exercises)

    def _select_quiz_words(self, stage: KeyStage, words: Sequence[str]) -> List[str]:
        size = self._config.quiz_size
        with_new, without_new = split_by_new_keys(words, stage.new_keys)
        new_count = math.ceil(size * self._config.new_key_ratio)

        chosen = pick_random(with_new, new_count, self._rng)
        chosen += pick_random(without_new, size - len(chosen), self._rng)
        if len(chosen) < size:
            leftovers = [word for word in words if word not in chosen]
            chosen += pick_random(leftovers, size - len(chosen), self._rng)
        return shuffled(chosen, self._rng)

    def _lesson(self, stage: KeyStage, exercises: List[str], quiz_words: List[str]) -> GeneratedLesson:
        cfg = self._config
        fallback = fallback_drills(stage.cumulative_keys)
        i = 0
        while fallback and len(exercises) < cfg.min_exercises:
            exercises.append(fallback[i % len(fallback)])
            i += 1

        quiz = list(quiz_words[: cfg.quiz_size])
        padding = pseudo_words(stage.cumulative_keys, cfg.quiz_size)
        i = 0
        while padding and len(quiz) < cfg.quiz_size:
            quiz.append(padding[i % len(padding)])
            i += 1

        title, summary = LESSON_META.get(stage.name, (stage.name.replace("_", " ").title(), ""))
        new_labels = [_key_label(key) for key in stage.new_keys]
        description = f"Learn keys: {', '.join(new_labels)}" if new_labels else summary

        return GeneratedLesson(
            id=stage.id,
            title=f"Lesson {stage.id}: {title}",
            description=description,
            concept_key=stage.concept_key,
            keys=stage.cumulative_keys,
            new_keys=stage.new_keys,
            exercises=tuple(exercises),
            quiz_words=tuple(quiz),
            min_wpm=min_wpm(stage.id, cfg),
            min_accuracy=min_accuracy(stage.id, cfg),
        )


class LessonCache:
    """Generated lesson sets keyed by the structured options tuple.

    Entries are immutable tuples replaced wholesale; concurrent misses may
    both compute and the last write wins.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple, Tuple[GeneratedLesson, ...]] = {}

    def __contains__(self, options: object) -> bool:
        return isinstance(options, LessonOptions) and options.cache_key() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, options: LessonOptions) -> Optional[Tuple[GeneratedLesson, ...]]:
        return self._entries.get(options.cache_key())

    def put(self, options: LessonOptions, lessons: Iterable[GeneratedLesson]) -> Tuple[GeneratedLesson, ...]:
        entry = tuple(lessons)
        self._entries[options.cache_key()] = entry
        return entry

    def replace_lesson(self, options: LessonOptions, lesson: GeneratedLesson) -> None:
        cached = self._entries.get(options.cache_key())
        if cached is None:
            return
        self._entries[options.cache_key()] = tuple(lesson if old.id == lesson.id else old for old in cached)

    def clear(self) -> None:
        self._entries.clear()
