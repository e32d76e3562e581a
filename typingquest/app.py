"""Entry points and wiring for the typingquest layout engine."""

import logging
import random
import time
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from typingquest.core import locales
from typingquest.core.config import DetectionConfig, LessonConfig
from typingquest.core.corpus import FALLBACK_LANGUAGE, WordCorpusLoader
from typingquest.core.curriculum import CurriculumRepository
from typingquest.core.detection import DetectionResult, LayoutDetector
from typingquest.core.layouts import LayoutRegistry, default_registry
from typingquest.core.lessons import GeneratedLesson, LessonAssembler, LessonCache, LessonOptions
from typingquest.core.levels import LevelRepository
from typingquest.core.mapper import CharacterMapper
from typingquest.core.preferences import JsonPreferenceStore, PreferenceStore
from typingquest.core.session import PracticeSession

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class LayoutEngine:
    """Detection, text adaptation and lesson generation behind one object.

    The engine only persists a confirmed layout when a preference store is
    passed in; without one it keeps the choice in memory.
    """

    def __init__(
        self,
        registry: Optional[LayoutRegistry] = None,
        curriculum: Optional[CurriculumRepository] = None,
        corpora: Optional[WordCorpusLoader] = None,
        levels: Optional[LevelRepository] = None,
        preferences: Optional[PreferenceStore] = None,
        detection_config: Optional[DetectionConfig] = None,
        lesson_config: Optional[LessonConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._registry = registry or default_registry()
        self._detector = LayoutDetector(self._registry, detection_config)
        self._mapper = CharacterMapper(self._registry)
        self._assembler = LessonAssembler(
            curriculum or CurriculumRepository(),
            corpora or WordCorpusLoader(),
            mapper=self._mapper,
            levels=levels,
            config=lesson_config,
            rng=rng,
        )
        self._cache = LessonCache()
        self._preferences = preferences
        self._layout_id = self._restore_layout()

    @property
    def registry(self) -> LayoutRegistry:
        return self._registry

    @property
    def saved_layout(self) -> Optional[str]:
        return self._layout_id

    def detect_layout(self, buffer: str) -> DetectionResult:
        return self._detector.detect(buffer)

    def preferred_candidate(self, buffer: str, locale: Optional[str] = None) -> Optional[str]:
        """Detect ``buffer`` and pick the layout to pre-select, using ``locale`` to break ties."""
        return locales.preferred_candidate(self.detect_layout(buffer), locale)

    def variant_for_family(self, lesson_family: str, locale: Optional[str] = None) -> str:
        return locales.variant_for_family(self._registry, lesson_family, locale)

    def transform_text(self, text: str, layout_id: str) -> str:
        return self._mapper.transform_text(text, layout_id)

    def transform_keys(self, keys: Sequence[str], layout_id: str) -> List[str]:
        return self._mapper.transform_keys(keys, layout_id)

    def confirm_layout(self, layout_id: str) -> None:
        """Remember ``layout_id`` as the user's layout. Unknown ids raise ``KeyError``."""
        self._registry.get(layout_id)
        self._layout_id = layout_id
        if self._preferences is not None:
            self._preferences.set_layout(layout_id)
        logger.info("Keyboard layout confirmed: %s", layout_id)

    def clear_layout(self) -> None:
        self._layout_id = None
        if self._preferences is not None:
            self._preferences.clear_layout()

    def options_for_layout(
        self,
        layout_id: Optional[str] = None,
        language: str = FALLBACK_LANGUAGE,
        **extra,
    ) -> LessonOptions:
        """Lesson options for ``layout_id``, or the confirmed layout when omitted."""
        layout_id = layout_id or self._layout_id
        if layout_id is None:
            return LessonOptions(language=language, **extra)
        return LessonOptions(
            layout_family=self._registry.lesson_family(layout_id),
            language=language,
            layout_id=layout_id,
            **extra,
        )

    def generate_lesson(self, stage_id: int, options: LessonOptions) -> GeneratedLesson:
        return self._assembler.generate_lesson(stage_id, options)

    def generate_all_lessons(self, options: LessonOptions) -> List[GeneratedLesson]:
        cached = self._cache.get(options)
        if cached is None:
            cached = self._cache.put(options, self._assembler.generate_all_lessons(options))
        return list(cached)

    async def generate_all_lessons_async(self, options: LessonOptions) -> List[GeneratedLesson]:
        cached = self._cache.get(options)
        if cached is None:
            lessons = await self._assembler.generate_all_lessons_async(options)
            cached = self._cache.put(options, lessons)
        return list(cached)

    def key_only_lessons(self, options: LessonOptions) -> List[GeneratedLesson]:
        return self._assembler.key_only_lessons(options)

    def regenerate_lesson(self, stage_id: int, options: LessonOptions) -> GeneratedLesson:
        """Fresh random content for one stage, replacing it in any cached set."""
        lesson = self._assembler.generate_lesson(stage_id, options)
        self._cache.replace_lesson(options, lesson)
        return lesson

    def regenerate_all_lessons(self, options: LessonOptions) -> List[GeneratedLesson]:
        return list(self._cache.put(options, self._assembler.generate_all_lessons(options)))

    def clear_cache(self) -> None:
        self._cache.clear()

    def start_session(self, lesson: GeneratedLesson, clock: Callable[[], float] = time.time) -> PracticeSession:
        logger.info("Starting lesson %d (%s)", lesson.id, lesson.title)
        return PracticeSession(lesson, clock=clock)

    def _restore_layout(self) -> Optional[str]:
        if self._preferences is None:
            return None
        layout_id = self._preferences.get_layout()
        if layout_id is not None and layout_id not in self._registry:
            logger.warning("Ignoring saved layout '%s': not in the catalog", layout_id)
            return None
        return layout_id


def create_engine(preferences_path: Optional[Path] = None, rng: Optional[random.Random] = None) -> LayoutEngine:
    """Engine with the shipped data, the authored curriculum and a JSON preference file."""
    return LayoutEngine(
        levels=LevelRepository(),
        preferences=JsonPreferenceStore(preferences_path),
        rng=rng,
    )


@lru_cache(maxsize=None)
def _default_engine() -> LayoutEngine:
    return LayoutEngine(levels=LevelRepository())


def detect_layout(buffer: str) -> DetectionResult:
    return _default_engine().detect_layout(buffer)


def transform_text(text: str, layout_id: str) -> str:
    return _default_engine().transform_text(text, layout_id)


def transform_keys(keys: Sequence[str], layout_id: str) -> List[str]:
    return _default_engine().transform_keys(keys, layout_id)


def generate_lesson(stage_id: int, options: LessonOptions) -> GeneratedLesson:
    return _default_engine().generate_lesson(stage_id, options)


def generate_all_lessons(options: LessonOptions) -> List[GeneratedLesson]:
    return _default_engine().generate_all_lessons(options)
