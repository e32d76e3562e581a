from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import yaml

from typingquest.core.config import DATA_DIR
from typingquest.core.layouts import LESSON_FAMILIES

PROGRESSIONS_FILE = DATA_DIR / "progressions.yaml"


@dataclass(frozen=True)
class KeyStage:
    id: int
    name: str
    new_keys: Tuple[str, ...]
    cumulative_keys: Tuple[str, ...]

    @property
    def concept_key(self) -> str:
        """i18n key for the stage's concept explanation."""
        return f"lesson.{self.name}.concept"


@dataclass(frozen=True)
class KeyProgression:
    family: str
    stages: Tuple[KeyStage, ...]

    def __len__(self) -> int:
        return len(self.stages)

    def get(self, stage_id: int) -> Optional[KeyStage]:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None


def build_cumulative(raw_stages: Iterable[Tuple[int, str, Sequence[str]]]) -> Tuple[KeyStage, ...]:
    """Attach to each ``(id, name, new_keys)`` the union of all keys introduced so far."""
    cumulative: List[str] = []
    stages: List[KeyStage] = []
    for stage_id, name, new_keys in raw_stages:
        for key in new_keys:
            if key not in cumulative:
                cumulative.append(key)
        stages.append(
            KeyStage(id=stage_id, name=name, new_keys=tuple(new_keys), cumulative_keys=tuple(cumulative))
        )
    return tuple(stages)


class CurriculumRepository:
    """Ordered key-introduction stages for every lesson family."""

    def __init__(
        self,
        progressions: Optional[Iterable[KeyProgression]] = None,
        source: Path = PROGRESSIONS_FILE,
    ) -> None:
        if progressions is None:
            self._progressions = self._load_progressions(source)
        else:
            self._progressions = {p.family: p for p in progressions}

    def families(self) -> List[str]:
        return list(self._progressions)

    def progression(self, family: str) -> KeyProgression:
        return self._progressions[family]

    def stage(self, family: str, stage_id: int) -> KeyStage:
        """Look up a stage; an unknown id for a known family means the tables are out of sync."""
        stage = self._progressions[family].get(stage_id)
        if stage is None:
            raise ValueError(f"Invalid stage {stage_id} for layout family {family}")
        return stage

    def available_keys(self, family: str, stage_id: int) -> FrozenSet[str]:
        return frozenset(self.stage(family, stage_id).cumulative_keys)

    def total_stages(self, family: str) -> int:
        return len(self._progressions[family])

    def _load_progressions(self, source: Path) -> Dict[str, KeyProgression]:
        if not source.exists():
            raise FileNotFoundError(f"Curriculum file not found: {source}")

        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("progressions"), dict):
            raise ValueError(f"{source.name}: expected YAML with a 'progressions' mapping")

        progressions: Dict[str, KeyProgression] = {}
        for family, raw_stages in raw["progressions"].items():
            if family not in LESSON_FAMILIES:
                raise ValueError(f"{source.name}: unknown lesson family '{family}'")
            if not isinstance(raw_stages, list) or not raw_stages:
                raise ValueError(f"{source.name}: '{family}' has no stages")

            parsed = []
            last_id = 0
            for item in raw_stages:
                if not isinstance(item, dict):
                    raise ValueError(f"{source.name}: '{family}' stages must be mappings")
                stage_id = item.get("id")
                name = item.get("name")
                new_keys = item.get("new_keys")
                if not isinstance(stage_id, int) or stage_id <= last_id:
                    raise ValueError(f"{source.name}: '{family}' stage ids must be increasing integers")
                if not name or not isinstance(name, str):
                    raise ValueError(f"{source.name}: '{family}' stage {stage_id} missing or invalid 'name'")
                if not isinstance(new_keys, list):
                    raise ValueError(f"{source.name}: '{family}' stage {stage_id} missing 'new_keys'")
                keys = [str(key) for key in new_keys]
                if any(len(key) != 1 for key in keys):
                    raise ValueError(f"{source.name}: '{family}' stage {stage_id} keys must be single characters")
                parsed.append((stage_id, name, keys))
                last_id = stage_id

            if not any(key.strip() for key in parsed[0][2]):
                raise ValueError(f"{source.name}: '{family}' first stage introduces no keys")
            progressions[family] = KeyProgression(family=family, stages=build_cumulative(parsed))

        return progressions
