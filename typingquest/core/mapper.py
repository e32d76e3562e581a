"""Position-by-position character remapping from the reference layout."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from typingquest.core.layouts import REFERENCE_LAYOUT, LayoutRegistry


class CharacterMapper:
    """Rewrites reference-layout text so it is typed with the same fingers on another layout.

    Each key position present in both layouts maps the reference character to
    the target character. Characters without an entry (digits, punctuation
    outside the grid, any other Unicode) pass through unchanged, so every
    transform is total.

    The mapping is not guaranteed to be invertible: two reference characters
    may land on the same target character.
    """

    def __init__(self, registry: LayoutRegistry, reference_id: str = REFERENCE_LAYOUT) -> None:
        self._registry = registry
        self._reference_id = reference_id

    @property
    def registry(self) -> LayoutRegistry:
        return self._registry

    @property
    def reference_id(self) -> str:
        return self._reference_id

    def build_mapping(self, target_id: str) -> Dict[str, str]:
        """Build the reference -> target lookup table for ``target_id``."""
        ref_rows = self._registry.get(self._reference_id).rows
        target_rows = self._registry.get(target_id).rows

        mapping: Dict[str, str] = {}
        for ref_row, target_row in zip(ref_rows, target_rows):
            for ref_key, target_key in zip(ref_row, target_row):
                ref_char = ref_key.lower()
                target_char = target_key.lower()
                if ref_char == target_char:
                    continue
                mapping[ref_char] = target_char
                # Only letters get an uppercase entry; ';'.upper() is still ';'.
                ref_upper = ref_char.upper()
                if ref_upper != ref_char:
                    mapping[ref_upper] = target_char.upper()
        return mapping

    def transform_text(self, text: str, target_id: str) -> str:
        if target_id == self._reference_id:
            return text
        mapping = self.build_mapping(target_id)
        return "".join(mapping.get(ch, ch) for ch in text)

    def transform_keys(self, keys: Sequence[str], target_id: str) -> List[str]:
        """Map single-key tokens, e.g. the "keys to learn" highlighted in a lesson."""
        if target_id == self._reference_id:
            return list(keys)
        mapping = self.build_mapping(target_id)
        return [mapping.get(key.lower(), key) for key in keys]

    def transform_exercises(self, exercises: Iterable[str], target_id: str) -> List[str]:
        if target_id == self._reference_id:
            return list(exercises)
        mapping = self.build_mapping(target_id)
        return ["".join(mapping.get(ch, ch) for ch in exercise) for exercise in exercises]

    def transform_quiz_words(self, words: Iterable[str], target_id: str) -> List[str]:
        if target_id == self._reference_id:
            return list(words)
        mapping = self.build_mapping(target_id)
        return ["".join(mapping.get(ch, ch) for ch in word) for word in words]
