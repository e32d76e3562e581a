"""Tests for typingquest.core.mapper – reference-to-target remapping."""

from __future__ import annotations

import pytest

from typingquest.core.layouts import REFERENCE_LAYOUT, LayoutDescriptor, LayoutRegistry, default_registry
from typingquest.core.mapper import CharacterMapper


def _shaped(layout_id: str, *rows: str) -> LayoutDescriptor:
    return LayoutDescriptor(
        id=layout_id,
        name=layout_id,
        region="Test",
        family="qwerty",
        lesson_family="qwerty",
        rows=tuple(tuple(row) for row in rows),
    )


@pytest.fixture()
def mapper() -> CharacterMapper:
    return CharacterMapper(default_registry())


# ---------------------------------------------------------------------------
# build_mapping
# ---------------------------------------------------------------------------

class TestBuildMapping:
    def test_reference_maps_to_nothing(self, mapper: CharacterMapper):
        assert mapper.build_mapping(REFERENCE_LAYOUT) == {}

    def test_qwertz_swaps_y_and_z(self, mapper: CharacterMapper):
        mapping = mapper.build_mapping("qwertz-de")
        assert mapping["y"] == "z"
        assert mapping["z"] == "y"
        assert mapping["Y"] == "Z"
        assert mapping["Z"] == "Y"

    def test_unchanged_positions_are_omitted(self, mapper: CharacterMapper):
        mapping = mapper.build_mapping("qwertz-de")
        assert "a" not in mapping
        assert "h" not in mapping

    def test_symbols_get_no_uppercase_entry(self, mapper: CharacterMapper):
        mapping = mapper.build_mapping("qwertz-de")
        assert mapping[";"] == "ö"
        assert ":" not in mapping

    def test_unknown_target_raises(self, mapper: CharacterMapper):
        with pytest.raises(KeyError):
            mapper.build_mapping("no-such-layout")

    def test_properties(self, mapper: CharacterMapper):
        assert mapper.reference_id == REFERENCE_LAYOUT
        assert mapper.registry is default_registry()


class TestMismatchedShapes:
    REFERENCE = _shaped("ref", "qwertyuiop", "asdfghjkl;", "zxcvbnm,./")

    def test_target_with_shorter_rows(self):
        short = _shaped("short", "qwertz", "asdfghjkl", "yxcv")
        mapper = CharacterMapper(LayoutRegistry([self.REFERENCE, short]), reference_id="ref")
        assert mapper.build_mapping("short") == {"y": "z", "Y": "Z", "z": "y", "Z": "Y"}
        assert mapper.transform_text("yuppy;", "short") == "zuppz;"

    def test_target_with_fewer_rows(self):
        two_rows = _shaped("two-rows", "qwertyuiop", "aoeuidhtns")
        mapper = CharacterMapper(LayoutRegistry([self.REFERENCE, two_rows]), reference_id="ref")
        mapping = mapper.build_mapping("two-rows")
        assert mapping["s"] == "o"
        assert mapping[";"] == "s"
        assert not set(mapping) & set("xcvbnm,./")
        assert mapper.transform_text("vx", "two-rows") == "vx"

    def test_reference_with_fewer_rows(self):
        home_only = _shaped("home-only", "qwertyuiop", "asdfghjkl;")
        full = _shaped("full", "qwertyuiop", "asdfghjkl;", "yxcvbnm,.-")
        mapper = CharacterMapper(LayoutRegistry([home_only, full]), reference_id="home-only")
        assert mapper.build_mapping("full") == {}


# ---------------------------------------------------------------------------
# transform_text
# ---------------------------------------------------------------------------

class TestTransformText:
    def test_yellow_on_qwertz(self, mapper: CharacterMapper):
        assert mapper.transform_text("yellow", "qwertz-de") == "zellow"

    def test_unaffected_word_unchanged(self, mapper: CharacterMapper):
        assert mapper.transform_text("hello", "qwertz-de") == "hello"

    def test_case_preserved_for_letters(self, mapper: CharacterMapper):
        assert mapper.transform_text("Yes;", "qwertz-de") == "Zesö"

    def test_reference_is_identity(self, mapper: CharacterMapper):
        text = "The quick brown fox; 123!"
        assert mapper.transform_text(text, REFERENCE_LAYOUT) == text

    def test_home_row_follows_fingers_on_dvorak(self, mapper: CharacterMapper):
        assert mapper.transform_text("asdf jkl;", "dvorak") == "aoeu htns"

    def test_unmapped_characters_pass_through(self, mapper: CharacterMapper):
        assert mapper.transform_text("123 !?", "azerty-fr") == "123 !?"

    def test_azerty_home_row(self, mapper: CharacterMapper):
        assert mapper.transform_text("a;", "azerty-fr") == "qm"

    def test_length_preserved(self, mapper: CharacterMapper):
        text = "pack my box with five dozen liquor jugs"
        for layout_id in default_registry().ids():
            assert len(mapper.transform_text(text, layout_id)) == len(text)


# ---------------------------------------------------------------------------
# transform_keys / transform_exercises
# ---------------------------------------------------------------------------

class TestTransformKeys:
    def test_keys_are_looked_up_lowercase(self, mapper: CharacterMapper):
        assert mapper.transform_keys(["a", ";", "Y"], "qwertz-de") == ["a", "ö", "z"]

    def test_unknown_key_passes_through(self, mapper: CharacterMapper):
        assert mapper.transform_keys(["1", " "], "dvorak") == ["1", " "]

    def test_reference_returns_copy(self, mapper: CharacterMapper):
        keys = ["a", "s"]
        result = mapper.transform_keys(keys, REFERENCE_LAYOUT)
        assert result == keys
        assert result is not keys


class TestTransformExercises:
    def test_each_exercise_mapped(self, mapper: CharacterMapper):
        assert mapper.transform_exercises(["zoo", "yak"], "qwertz-de") == ["yoo", "zak"]

    def test_reference_returns_copy(self, mapper: CharacterMapper):
        exercises = ["asdf", "jkl;"]
        result = mapper.transform_exercises(exercises, REFERENCE_LAYOUT)
        assert result == exercises
        assert result is not exercises

    def test_accepts_tuples(self, mapper: CharacterMapper):
        assert mapper.transform_exercises(("y",), "qwertz-ch") == ["z"]


class TestTransformQuizWords:
    def test_each_word_mapped(self, mapper: CharacterMapper):
        assert mapper.transform_quiz_words(["yes", "zoo"], "qwertz-de") == ["zes", "yoo"]

    def test_order_and_count_preserved(self, mapper: CharacterMapper):
        words = ["sad", "lad", "dad", "fall"]
        assert mapper.transform_quiz_words(words, "dvorak") == ["oae", "nae", "eae", "uann"]

    def test_reference_returns_list(self, mapper: CharacterMapper):
        assert mapper.transform_quiz_words(("sad", "lad"), REFERENCE_LAYOUT) == ["sad", "lad"]
