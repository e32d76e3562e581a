"""Letter-availability filtering and word selection over a corpus.

A word is usable at a lesson stage only if every one of its letters is a key
the learner already knows. There is no partial credit: one unavailable
letter disqualifies the whole word.
"""

from __future__ import annotations

import math
import random
from typing import Collection, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from typingquest.core.corpus import WordCorpus, compute_letter_set

T = TypeVar("T")


def shuffled(items: Iterable[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def pick_random(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    return shuffled(items, rng)[: max(0, count)]


def _normalize_keys(keys: Iterable[str]) -> frozenset:
    return frozenset(key.lower() for key in keys)


def uses_only_available_keys(letters: Collection[str], available_keys: Collection[str]) -> bool:
    return all(letter.lower() in available_keys for letter in letters)


def includes_required_key(letters: Collection[str], required_keys: Iterable[str]) -> bool:
    return any(key.lower() in letters for key in required_keys)


def get_valid_words(
    corpus: WordCorpus,
    available_keys: Iterable[str],
    min_length: int = 1,
    max_length: Optional[int] = None,
    must_include: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
    shuffle: bool = False,
    exclude: Optional[Collection[str]] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Words typeable with ``available_keys``, most frequent first.

    ``must_include`` keeps words containing at least one of the given keys.
    ``shuffle`` randomizes the order before ``limit`` is applied, which
    deliberately discards the frequency ranking.
    """
    keys = _normalize_keys(available_keys)
    required = _normalize_keys(must_include or ())
    excluded = set(exclude or ())

    filtered = [
        entry
        for entry in corpus.words
        if len(entry.word) >= min_length
        and (max_length is None or len(entry.word) <= max_length)
        and entry.letters <= keys
        and (not required or entry.letters & required)
        and entry.word not in excluded
    ]
    # sorted() is stable, so equal frequencies keep corpus order
    filtered = sorted(filtered, key=lambda entry: -entry.frequency)

    if shuffle:
        filtered = shuffled(filtered, rng)
    if limit is not None:
        filtered = filtered[: max(0, limit)]
    return [entry.word for entry in filtered]


def get_words_for_new_keys(
    corpus: WordCorpus,
    available_keys: Iterable[str],
    new_keys: Sequence[str],
    min_length: int = 1,
    max_length: Optional[int] = None,
    limit: Optional[int] = None,
    shuffle: bool = False,
    new_key_ratio: float = 0.7,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Select words in two phases so newly introduced keys get most of the practice.

    Phase A takes ``ceil(limit * new_key_ratio)`` words containing a new key.
    Phase B fills the rest with any other valid word. The result can be
    shorter than ``limit`` when the corpus has too few matches.
    """
    keys = _normalize_keys(available_keys)
    options = dict(min_length=min_length, max_length=max_length, shuffle=shuffle, rng=rng)

    phase_a_limit = math.ceil(limit * new_key_ratio) if limit is not None else None
    with_new_keys = get_valid_words(corpus, keys, must_include=new_keys, limit=phase_a_limit, **options)

    remaining = limit - len(with_new_keys) if limit is not None else None
    reinforcement = get_valid_words(corpus, keys, limit=remaining, exclude=set(with_new_keys), **options)
    return with_new_keys + reinforcement


def validate_word(word: str, available_keys: Iterable[str]) -> bool:
    return uses_only_available_keys(compute_letter_set(word), _normalize_keys(available_keys))


def validate_word_list(words: Iterable[str], available_keys: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split ``words`` into ``(valid, invalid)`` for the given keys."""
    keys = _normalize_keys(available_keys)
    valid: List[str] = []
    invalid: List[str] = []
    for word in words:
        (valid if uses_only_available_keys(compute_letter_set(word), keys) else invalid).append(word)
    return valid, invalid


def deduplicate_words(words: Iterable[str]) -> List[str]:
    """Drop case-insensitive repeats, keeping the first occurrence."""
    seen = set()
    result: List[str] = []
    for word in words:
        lowered = word.lower()
        if lowered in seen:
            continue
        seen.add(lowered)
        result.append(word)
    return result


def mix_word_sources(
    sources: Sequence[Tuple[Sequence[str], float]],
    total_count: int = 100,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Blend ``(words, ratio)`` sources; ratios are normalized to sum to 1."""
    total_ratio = sum(ratio for _, ratio in sources)
    if total_ratio <= 0:
        return []

    selected: List[str] = []
    for words, ratio in sources:
        if not words:
            continue
        count = math.ceil(total_count * ratio / total_ratio)
        selected.extend(pick_random(words, count, rng))
    return shuffled(selected, rng)[:total_count]


def mix_words(
    primary: Sequence[str],
    secondary: Sequence[str],
    primary_ratio: float = 0.7,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Weighted random interleave of two word lists, at least 50 words when available."""
    if not secondary:
        return shuffled(primary, rng)

    total = max(len(primary), 50)
    primary_count = math.floor(total * primary_ratio)
    secondary_count = total - primary_count
    return shuffled(
        pick_random(primary, primary_count, rng) + pick_random(secondary, secondary_count, rng),
        rng,
    )


def split_by_new_keys(words: Iterable[str], new_keys: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split ``words`` into those using a new key and those that do not."""
    required = _normalize_keys(new_keys)
    with_new: List[str] = []
    without_new: List[str] = []
    for word in words:
        (with_new if compute_letter_set(word) & required else without_new).append(word)
    return with_new, without_new


def bucket_by_length(words: Iterable[str], tiers: Dict[str, Tuple[int, Optional[int]]]) -> Dict[str, List[str]]:
    """Group words into named ``(min, max)`` length tiers; ``max=None`` is open-ended."""
    buckets: Dict[str, List[str]] = {name: [] for name in tiers}
    for word in words:
        for name, (low, high) in tiers.items():
            if len(word) >= low and (high is None or len(word) <= high):
                buckets[name].append(word)
    return buckets
