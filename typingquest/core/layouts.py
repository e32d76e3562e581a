from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml

from typingquest.core.config import DATA_DIR

LAYOUTS_FILE = DATA_DIR / "layouts.yaml"

# Lesson content is authored against this layout.
REFERENCE_LAYOUT = "qwerty-us"

HOME_ROW_INDEX = 1
HOME_ROW_WIDTH = 10

LESSON_FAMILIES = ("qwerty", "qwertz", "azerty", "dvorak", "colemak")

# Finger assignment depends only on the physical position, never on the layout.
_ROW_FINGERS = (
    "left-pinky",
    "left-ring",
    "left-middle",
    "left-index",
    "left-index",
    "right-index",
    "right-index",
    "right-middle",
    "right-ring",
    "right-pinky",
)


@dataclass(frozen=True)
class LayoutDescriptor:
    id: str
    name: str
    region: str
    family: str
    lesson_family: str
    rows: Tuple[Tuple[str, ...], ...]
    description: str = ""

    @property
    def home_row_signature(self) -> str:
        """The home-row keys concatenated and lowercased."""
        return "".join(self.rows[HOME_ROW_INDEX]).lower()


def finger_for_position(row: int, col: int) -> str:
    """Return the finger that presses the key at ``(row, col)``.

    Anything outside the three letter rows (the space bar row) is a thumb.
    """
    if 0 <= row <= 2 and 0 <= col < len(_ROW_FINGERS):
        return _ROW_FINGERS[col]
    return "thumb"


class LayoutRegistry:
    """Read-only catalog of keyboard layouts, keyed by layout id."""

    def __init__(
        self,
        layouts: Optional[Iterable[LayoutDescriptor]] = None,
        source: Path = LAYOUTS_FILE,
    ) -> None:
        if layouts is None:
            self._layouts = self._load_layouts(source)
        else:
            self._layouts = {layout.id: layout for layout in layouts}

    def __contains__(self, layout_id: object) -> bool:
        return layout_id in self._layouts

    def __len__(self) -> int:
        return len(self._layouts)

    def get(self, layout_id: str) -> LayoutDescriptor:
        return self._layouts[layout_id]

    def all(self) -> List[LayoutDescriptor]:
        return list(self._layouts.values())

    def ids(self) -> List[str]:
        return list(self._layouts)

    def by_region(self, region: str) -> List[LayoutDescriptor]:
        return [layout for layout in self._layouts.values() if layout.region == region]

    def by_family(self, family: str) -> List[LayoutDescriptor]:
        return [layout for layout in self._layouts.values() if layout.family == family]

    def regions(self) -> List[str]:
        """Unique regions, sorted, for grouping layouts in a picker."""
        return sorted({layout.region for layout in self._layouts.values()})

    def lesson_family(self, layout_id: str) -> str:
        return self._layouts[layout_id].lesson_family

    def home_row_keys(self, layout_id: str) -> List[str]:
        return list(self._layouts[layout_id].rows[HOME_ROW_INDEX])

    def _load_layouts(self, source: Path) -> Dict[str, LayoutDescriptor]:
        if not source.exists():
            raise FileNotFoundError(f"Layout catalog not found: {source}")

        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("layouts"), list):
            raise ValueError(f"{source.name}: expected YAML with a 'layouts' list")

        layouts: Dict[str, LayoutDescriptor] = {}
        for entry in raw["layouts"]:
            layout = _parse_layout(entry, source.name)
            if layout.id in layouts:
                raise ValueError(f"{source.name}: duplicate layout id '{layout.id}'")
            layouts[layout.id] = layout

        if not layouts:
            raise ValueError(f"{source.name}: no layouts defined")
        return layouts


def _parse_layout(entry: object, source_name: str) -> LayoutDescriptor:
    if not isinstance(entry, dict):
        raise ValueError(f"{source_name}: layout entries must be mappings")
    layout_id = entry.get("id")
    if not layout_id or not isinstance(layout_id, str):
        raise ValueError(f"{source_name}: layout missing or invalid 'id'")

    for field in ("name", "region", "family", "lesson_family"):
        value = entry.get(field)
        if not value or not isinstance(value, str):
            raise ValueError(f"{source_name}: layout '{layout_id}' missing or invalid '{field}'")
    if entry["lesson_family"] not in LESSON_FAMILIES:
        raise ValueError(
            f"{source_name}: layout '{layout_id}' has unknown lesson family '{entry['lesson_family']}'"
        )

    raw_rows = entry.get("rows")
    if not isinstance(raw_rows, list) or len(raw_rows) <= HOME_ROW_INDEX:
        raise ValueError(f"{source_name}: layout '{layout_id}' needs at least {HOME_ROW_INDEX + 1} rows")
    rows = []
    for raw_row in raw_rows:
        # a row is either a string of keys or a list of single-character keys
        keys = tuple(raw_row) if isinstance(raw_row, str) else tuple(str(k) for k in raw_row)
        if not keys or any(len(k) != 1 for k in keys):
            raise ValueError(f"{source_name}: layout '{layout_id}' has a malformed row {raw_row!r}")
        rows.append(keys)
    if len(rows[HOME_ROW_INDEX]) != HOME_ROW_WIDTH:
        raise ValueError(
            f"{source_name}: layout '{layout_id}' home row must have {HOME_ROW_WIDTH} keys"
        )

    return LayoutDescriptor(
        id=layout_id,
        name=entry["name"].strip(),
        region=entry["region"].strip(),
        family=entry["family"].strip(),
        lesson_family=entry["lesson_family"],
        rows=tuple(rows),
        description=str(entry.get("description") or "").strip(),
    )


@lru_cache(maxsize=None)
def default_registry() -> LayoutRegistry:
    """The shipped layout catalog, loaded once per process."""
    return LayoutRegistry()
