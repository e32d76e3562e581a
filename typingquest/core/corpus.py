from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

import yaml

from typingquest.core.config import DATA_DIR

logger = logging.getLogger(__name__)

WORDS_DIR = DATA_DIR / "words"

FALLBACK_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "de", "fr", "es", "pt", "it", "nl", "sv", "pl", "tr")
CATEGORIES = ("common", "technical", "native-specific")

RawWord = Union[str, Tuple[str, int], Tuple[str, int, Optional[str]]]


def compute_letter_set(word: str) -> FrozenSet[str]:
    """Distinct lowercase characters of ``word``."""
    return frozenset(word.lower())


@dataclass(frozen=True)
class WordEntry:
    word: str
    letters: FrozenSet[str]
    frequency: int = 5
    category: Optional[str] = None

    @classmethod
    def create(cls, word: str, frequency: int = 5, category: Optional[str] = None) -> "WordEntry":
        return cls(word=word, letters=compute_letter_set(word), frequency=frequency, category=category)


@dataclass(frozen=True)
class WordCorpus:
    """A language's frequency-ranked practice vocabulary. Immutable once built."""

    language: str
    words: Tuple[WordEntry, ...]

    def __len__(self) -> int:
        return len(self.words)

    @classmethod
    def from_raw(cls, language: str, raw_words: Iterable[RawWord]) -> "WordCorpus":
        """Build a corpus from bare words or ``(word, frequency[, category])`` tuples."""
        entries: List[WordEntry] = []
        for raw in raw_words:
            if isinstance(raw, str):
                entries.append(WordEntry.create(raw))
            else:
                entries.append(WordEntry.create(*raw))
        return cls(language=language, words=tuple(entries))


CorpusSource = Callable[[str], WordCorpus]


def load_word_file(language: str, base_dir: Path = WORDS_DIR) -> WordCorpus:
    """Read ``<base_dir>/<language>.yaml`` into a corpus."""
    path = base_dir / f"{language}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return parse_corpus(language, raw, path.name)


def parse_corpus(language: str, raw: object, source_name: str = "<memory>") -> WordCorpus:
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{source_name}: expected YAML with a 'words' section")
    words = raw.get("words")
    if not words:
        raise ValueError(f"{source_name}: missing or empty 'words'")

    categories: Dict[str, str] = {}
    for category, members in (raw.get("categories") or {}).items():
        if category not in CATEGORIES:
            raise ValueError(f"{source_name}: unknown category '{category}'")
        for member in members or []:
            categories[str(member)] = category

    if isinstance(words, dict):
        # word: frequency
        items = [(str(word), freq, None) for word, freq in words.items()]
    elif isinstance(words, list):
        items = []
        for item in words:
            if isinstance(item, dict):
                items.append((str(item.get("word", "")), item.get("frequency", 5), item.get("category")))
            else:
                items.append((str(item), 5, None))
    else:
        raise ValueError(f"{source_name}: 'words' must be a mapping or a list")

    entries: List[WordEntry] = []
    for word, frequency, category in items:
        word = word.strip()
        if not word:
            raise ValueError(f"{source_name}: empty word entry")
        if not isinstance(frequency, int) or isinstance(frequency, bool) or not 1 <= frequency <= 10:
            raise ValueError(f"{source_name}: '{word}' has invalid frequency {frequency!r}")
        entries.append(WordEntry.create(word, frequency, category or categories.get(word, "common")))

    return WordCorpus(language=language, words=tuple(entries))


def available_languages(base_dir: Path = WORDS_DIR) -> List[str]:
    """Languages that ship a native word list."""
    return sorted(path.stem for path in base_dir.glob("*.yaml"))


def has_native_corpus(language: str, base_dir: Path = WORDS_DIR) -> bool:
    """True when ``language`` is supported and has its own word list rather than the English one."""
    return language in SUPPORTED_LANGUAGES and language in available_languages(base_dir)


class WordCorpusLoader:
    """Lazily loads and caches word corpora per language.

    A corpus that fails to load for any language other than English is
    replaced by the English corpus, with a warning. For supported languages
    the English corpus is then cached under that code, so the warning is
    logged once. Unknown codes are retried on every load. Only a failure to
    load English reaches the caller.
    """

    def __init__(self, source: Optional[CorpusSource] = None) -> None:
        self._source: CorpusSource = source or load_word_file
        self._cache: Dict[str, WordCorpus] = {}

    def load(self, language: str) -> WordCorpus:
        cached = self._cache.get(language)
        if cached is not None:
            return cached
        try:
            corpus = self._source(language)
        except Exception as e:
            if language == FALLBACK_LANGUAGE:
                raise
            logger.warning(
                "Could not load word list for '%s', falling back to '%s': %s",
                language,
                FALLBACK_LANGUAGE,
                e,
            )
            corpus = self.load(FALLBACK_LANGUAGE)
            if language in SUPPORTED_LANGUAGES:
                self._cache[language] = corpus
            return corpus
        self._cache[language] = corpus
        logger.info("Loaded %d words for '%s'", len(corpus), language)
        return corpus

    async def load_async(self, language: str) -> WordCorpus:
        """Awaitable form of :meth:`load`; the read runs in a worker thread."""
        cached = self._cache.get(language)
        if cached is not None:
            return cached
        return await asyncio.to_thread(self.load, language)

    def preload(self, languages: Iterable[str]) -> None:
        for language in languages:
            self.load(language)

    def is_loaded(self, language: str) -> bool:
        return language in self._cache

    def clear(self) -> None:
        self._cache.clear()
