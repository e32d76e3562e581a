from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from typingquest.core.config import DATA_DIR
from typingquest.core.mapper import CharacterMapper

LEVELS_DIR = DATA_DIR / "levels"


@dataclass(frozen=True)
class Level:
    """A hand-written lesson, authored against the reference layout."""

    key: str
    id: int
    name: str
    keys: Tuple[str, ...]
    exercises: Tuple[str, ...]
    quiz_words: Tuple[str, ...] = ()


class LevelRepository:
    def __init__(self, base_dir: Path = LEVELS_DIR) -> None:
        self._levels = self._load_levels(base_dir)

    def all(self) -> List[Level]:
        return list(self._levels.values())

    def get(self, key: str) -> Level:
        return self._levels[key]

    def by_id(self, level_id: int) -> Optional[Level]:
        return self._levels.get(f"level{level_id}")

    def _load_levels(self, base_dir: Path) -> Dict[str, Level]:
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[str, Level] = {}

        def _sort_key(p: Path) -> Tuple[int, str]:
            m = re.match(r"^level(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for level_path in sorted(base_dir.glob("level*.yaml"), key=_sort_key):
            key = level_path.stem
            m = re.match(r"^level(\d+)$", key)
            if not m:
                raise ValueError(f"{level_path.name}: file name must be level<N>.yaml")
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{level_path.name}: expected YAML with 'title' and 'content'")
            title = raw.get("title")
            content = raw.get("content")
            if not title or not isinstance(title, str):
                raise ValueError(f"{level_path.name}: missing or invalid 'title'")
            if content is None:
                raise ValueError(f"{level_path.name}: missing 'content'")
            if isinstance(content, list):
                exercises = [str(item).strip() for item in content if str(item).strip()]
            else:
                # allow content as multiline string
                text = str(content).strip()
                exercises = [line.strip() for line in text.splitlines() if line.strip()]
            if not exercises:
                raise ValueError(f"{level_path.name}: 'content' has no exercises")
            keys = raw.get("keys") or []
            if not isinstance(keys, list) or any(len(str(k)) != 1 for k in keys):
                raise ValueError(f"{level_path.name}: 'keys' must be a list of single characters")
            quiz_words = [str(w).strip() for w in raw.get("quiz_words") or [] if str(w).strip()]
            levels[key] = Level(
                key=key,
                id=int(m.group(1)),
                name=title.strip(),
                keys=tuple(str(k) for k in keys),
                exercises=tuple(exercises),
                quiz_words=tuple(quiz_words),
            )

        if not levels:
            raise ValueError("No level files (level*.yaml) found in data/levels")
        return levels


def map_level(level: Level, mapper: CharacterMapper, layout_id: str) -> Level:
    """Return ``level`` rewritten for ``layout_id``, finger for finger."""
    return replace(
        level,
        keys=tuple(mapper.transform_keys(level.keys, layout_id)),
        exercises=tuple(mapper.transform_exercises(level.exercises, layout_id)),
        quiz_words=tuple(mapper.transform_quiz_words(level.quiz_words, layout_id)),
    )


def levels_for_layout(repository: LevelRepository, mapper: CharacterMapper, layout_id: str) -> List[Level]:
    return [map_level(level, mapper, layout_id) for level in repository.all()]
