"""Locale hints for picking a layout variant within a family.

A browser or OS locale never decides the layout on its own. It only
pre-selects the most likely choice when detection reports several
candidates, and picks a regional variant once a lesson family is known.
"""

from __future__ import annotations

from typing import Dict, Optional

from typingquest.core.detection import DetectionResult
from typingquest.core.layouts import LayoutRegistry

LOCALE_TO_LAYOUT: Dict[str, str] = {
    # German-speaking countries
    "de-de": "qwertz-de",
    "de-at": "qwertz-de",
    "de-ch": "qwertz-ch",
    "de": "qwertz-de",
    # French-speaking countries
    "fr-fr": "azerty-fr",
    "fr-be": "azerty-be",
    "fr-ch": "qwertz-ch",  # Swiss French types on QWERTZ
    "fr-ca": "qwerty-ca",
    "fr": "azerty-fr",
    "nl-be": "azerty-be",
    # English
    "en-us": "qwerty-us",
    "en-gb": "qwerty-uk",
    "en-au": "qwerty-uk",
    "en-nz": "qwerty-uk",
    "en-ie": "qwerty-uk",
    "en-in": "qwerty-in",
    "en-ca": "qwerty-ca",
    "en": "qwerty-us",
    # Portuguese
    "pt-br": "qwerty-br",
    "pt-pt": "qwerty-pt",
    "pt": "qwerty-pt",
    # Spanish
    "es-es": "qwerty-es",
    "es-mx": "qwerty-latam",
    "es-ar": "qwerty-latam",
    "es-co": "qwerty-latam",
    "es-cl": "qwerty-latam",
    "es-pe": "qwerty-latam",
    "es-ve": "qwerty-latam",
    "es": "qwerty-latam",
    # Other European
    "it-it": "qwerty-it",
    "it-ch": "qwertz-ch",
    "it": "qwerty-it",
    "nl-nl": "qwerty-nl",
    "nl": "qwerty-nl",
    # Nordic
    "sv-se": "qwerty-nordic",
    "sv": "qwerty-nordic",
    "fi-fi": "qwerty-nordic",
    "fi": "qwerty-nordic",
    "nb-no": "qwerty-nordic",
    "nn-no": "qwerty-nordic",
    "no": "qwerty-nordic",
    "da-dk": "qwerty-nordic",
    "da": "qwerty-nordic",
    # Eastern Europe and Turkey
    "pl-pl": "qwerty-pl",
    "pl": "qwerty-pl",
    "tr-tr": "qwerty-tr",
    "tr": "qwerty-tr",
}

FAMILY_DEFAULTS: Dict[str, str] = {
    "qwerty": "qwerty-us",
    "qwertz": "qwertz-de",
    "azerty": "azerty-fr",
    "dvorak": "dvorak",
    "colemak": "colemak",
}


def layout_for_locale(locale: str) -> Optional[str]:
    """Exact ``lang-region`` match first, then the bare language."""
    normalized = locale.strip().lower().replace("_", "-")
    if normalized in LOCALE_TO_LAYOUT:
        return LOCALE_TO_LAYOUT[normalized]
    return LOCALE_TO_LAYOUT.get(normalized.split("-")[0])


def variant_for_family(registry: LayoutRegistry, lesson_family: str, locale: Optional[str] = None) -> str:
    hinted = layout_for_locale(locale) if locale else None
    if hinted and hinted in registry and registry.lesson_family(hinted) == lesson_family:
        return hinted
    return FAMILY_DEFAULTS[lesson_family]


def preferred_candidate(result: DetectionResult, locale: Optional[str] = None) -> Optional[str]:
    """Candidate to pre-select when asking the user to disambiguate."""
    if result.layout is not None:
        return result.layout
    if not result.candidates:
        return None
    hinted = layout_for_locale(locale) if locale else None
    if hinted in result.candidates:
        return hinted
    return result.candidates[0]
