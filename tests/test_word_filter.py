"""Tests for typingquest.core.word_filter – letter-availability filtering."""

from __future__ import annotations

import math
import random

import pytest

from typingquest.core.corpus import WordCorpus, compute_letter_set
from typingquest.core.word_filter import (
    bucket_by_length,
    deduplicate_words,
    get_valid_words,
    get_words_for_new_keys,
    includes_required_key,
    mix_word_sources,
    mix_words,
    pick_random,
    shuffled,
    split_by_new_keys,
    uses_only_available_keys,
    validate_word,
    validate_word_list,
)

HOME_KEYS = {"a", "s", "d", "f", "j", "k", "l", " "}


@pytest.fixture()
def corpus() -> WordCorpus:
    return WordCorpus.from_raw(
        "en",
        [
            ("dad", 8),
            ("flask", 5),
            ("hello", 9),
            ("sad", 8),
            ("all", 9),
            ("a", 10),
            ("fall", 6),
            ("salad", 4),
            ("glad", 7),
            ("shed", 6),
            ("had", 9),
            ("sales", 5),
        ],
    )


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

class TestPredicates:
    def test_uses_only_available_keys(self):
        assert uses_only_available_keys(compute_letter_set("dad"), HOME_KEYS)
        assert not uses_only_available_keys(compute_letter_set("hello"), HOME_KEYS)

    def test_includes_required_key(self):
        assert includes_required_key(compute_letter_set("glad"), ["g", "h"])
        assert not includes_required_key(compute_letter_set("dad"), ["g", "h"])

    def test_validate_word_is_case_insensitive(self):
        assert validate_word("DAD", ["a", "d"])

    def test_validate_word_list(self):
        valid, invalid = validate_word_list(["dad", "hello", "sad"], HOME_KEYS)
        assert valid == ["dad", "sad"]
        assert invalid == ["hello"]


# ---------------------------------------------------------------------------
# get_valid_words
# ---------------------------------------------------------------------------

class TestGetValidWords:
    def test_home_row_example(self):
        small = WordCorpus.from_raw("en", [("dad", 8), ("flask", 5), ("hello", 9)])
        assert get_valid_words(small, HOME_KEYS, min_length=2) == ["dad", "flask"]

    def test_every_result_is_typeable(self, corpus: WordCorpus):
        for word in get_valid_words(corpus, HOME_KEYS):
            assert compute_letter_set(word) <= HOME_KEYS

    def test_sorted_by_descending_frequency_stable(self, corpus: WordCorpus):
        assert get_valid_words(corpus, HOME_KEYS, min_length=2) == ["all", "dad", "sad", "fall", "flask", "salad"]

    def test_min_and_max_length(self, corpus: WordCorpus):
        assert get_valid_words(corpus, HOME_KEYS, min_length=4, max_length=4) == ["fall"]

    def test_must_include(self, corpus: WordCorpus):
        words = get_valid_words(corpus, HOME_KEYS | {"g", "h", "e"}, must_include=["g", "h"])
        assert words == ["had", "glad", "shed"]

    def test_limit(self, corpus: WordCorpus):
        assert get_valid_words(corpus, HOME_KEYS, limit=2) == ["a", "all"]

    def test_zero_limit_is_empty(self, corpus: WordCorpus):
        assert get_valid_words(corpus, HOME_KEYS, limit=0) == []

    def test_exclude(self, corpus: WordCorpus):
        assert "dad" not in get_valid_words(corpus, HOME_KEYS, exclude={"dad"})

    def test_uppercase_keys_accepted(self, corpus: WordCorpus):
        assert get_valid_words(corpus, ["D", "A"]) == ["a", "dad"]

    def test_shuffle_keeps_membership(self, corpus: WordCorpus):
        ordered = get_valid_words(corpus, HOME_KEYS)
        mixed = get_valid_words(corpus, HOME_KEYS, shuffle=True, rng=random.Random(3))
        assert sorted(mixed) == sorted(ordered)

    def test_empty_corpus(self):
        assert get_valid_words(WordCorpus("en", ()), HOME_KEYS) == []


# ---------------------------------------------------------------------------
# get_words_for_new_keys
# ---------------------------------------------------------------------------

class TestGetWordsForNewKeys:
    def test_new_key_words_come_first(self, corpus: WordCorpus):
        keys = HOME_KEYS | {"g", "h", "e"}
        words = get_words_for_new_keys(corpus, keys, ["g", "h"], min_length=2)
        with_new = words[:3]
        assert set(with_new) == {"had", "glad", "shed"}
        assert all(compute_letter_set(w) & {"g", "h"} for w in with_new)

    def test_no_duplicates_between_phases(self, corpus: WordCorpus):
        keys = HOME_KEYS | {"g", "h", "e"}
        words = get_words_for_new_keys(corpus, keys, ["g", "h"])
        assert len(words) == len(set(words))

    def test_phase_a_takes_ratio_of_limit(self, corpus: WordCorpus):
        keys = HOME_KEYS | {"g", "h", "e"}
        words = get_words_for_new_keys(corpus, keys, ["g", "h"], limit=4)
        assert len(words) == 4
        phase_a = math.ceil(4 * 0.7)
        assert sum(1 for w in words if compute_letter_set(w) & {"g", "h"}) == phase_a

    def test_new_key_share_when_supply_is_ample(self):
        raw = [(f"g{'a' * n}", 5) for n in range(1, 40)] + [(f"s{'a' * n}", 5) for n in range(1, 40)]
        rich = WordCorpus.from_raw("en", raw)
        words = get_words_for_new_keys(rich, {"a", "s", "g"}, ["g"], limit=20)
        assert len(words) == 20
        assert sum(1 for w in words if "g" in w) >= math.ceil(20 * 0.7)

    def test_short_result_when_supply_is_thin(self, corpus: WordCorpus):
        words = get_words_for_new_keys(corpus, HOME_KEYS, ["j"], limit=50)
        assert len(words) < 50
        assert words == get_valid_words(corpus, HOME_KEYS)

    def test_without_limit_returns_everything(self, corpus: WordCorpus):
        keys = HOME_KEYS | {"g", "h", "e"}
        assert sorted(get_words_for_new_keys(corpus, keys, ["g"])) == sorted(get_valid_words(corpus, keys))


# ---------------------------------------------------------------------------
# Mixing and helpers
# ---------------------------------------------------------------------------

class TestMixing:
    def test_mix_words_without_secondary_keeps_primary(self):
        rng = random.Random(1)
        assert sorted(mix_words(["a", "b"], [], rng=rng)) == ["a", "b"]

    def test_mix_words_draws_from_both(self):
        primary = [f"p{i}" for i in range(60)]
        secondary = [f"s{i}" for i in range(60)]
        mixed = mix_words(primary, secondary, 0.5, rng=random.Random(2))
        assert len(mixed) == 60
        assert sum(1 for w in mixed if w.startswith("p")) == 30

    def test_mix_word_sources_respects_total(self):
        mixed = mix_word_sources([(["a", "b", "c"], 1.0), (["x", "y", "z"], 1.0)], total_count=4, rng=random.Random(0))
        assert len(mixed) == 4

    def test_mix_word_sources_zero_ratio(self):
        assert mix_word_sources([(["a"], 0.0)]) == []

    def test_deduplicate_is_case_insensitive(self):
        assert deduplicate_words(["Das", "das", "und", "Das"]) == ["Das", "und"]

    def test_split_by_new_keys(self):
        with_new, without_new = split_by_new_keys(["glad", "dad", "had"], ["g", "h"])
        assert with_new == ["glad", "had"]
        assert without_new == ["dad"]

    def test_bucket_by_length(self):
        buckets = bucket_by_length(["as", "fall", "salad", "flasks", "jackdaws"], {"short": (2, 4), "long": (5, None)})
        assert buckets == {"short": ["as", "fall"], "long": ["salad", "flasks", "jackdaws"]}

    def test_shuffled_returns_new_list(self):
        items = [1, 2, 3]
        result = shuffled(items, random.Random(0))
        assert sorted(result) == items
        assert result is not items

    def test_pick_random_caps_count(self):
        assert len(pick_random([1, 2, 3], 10)) == 3
        assert pick_random([1, 2, 3], -1) == []
