"""
Message translation for ffbar.

Catalogs are compiled gettext files under
``ffbar/locales/<lang>/LC_MESSAGES/ffbar.mo``. English is the source
language; every other language is offered only when its catalog ships.
Messages a catalog does not cover come back unchanged.
"""

import gettext
import locale
import os
from pathlib import Path
from typing import Callable, List, Optional

DOMAIN = "ffbar"
DEFAULT_LANGUAGE = "en"
LANGUAGE_ENV_VARS = ("FFBAR_LANG", "LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG")

_translate: Optional[Callable[[str], str]] = None


def get_locales_dir() -> Path:
    """Directory holding the compiled catalogs."""
    return Path(__file__).parent / "locales"


def available_languages() -> List[str]:
    """English plus every language with a compiled catalog."""
    langs = {DEFAULT_LANGUAGE}
    for mo_file in get_locales_dir().glob(f"*/LC_MESSAGES/{DOMAIN}.mo"):
        langs.add(mo_file.parent.parent.name)
    return sorted(langs)


def _language_code(value: str) -> str:
    # 'fr_FR.UTF-8' -> 'fr', 'fr:en' -> 'fr'
    return value.split(":")[0].split(".")[0].split("_")[0].lower()


def detect_system_language() -> str:
    """Pick the first available language named by the environment or locale."""
    available = available_languages()

    for env_var in LANGUAGE_ENV_VARS:
        value = os.environ.get(env_var, "")
        if value and _language_code(value) in available:
            return _language_code(value)

    try:
        loc = locale.getlocale()[0]
    except ValueError:
        loc = None
    if loc and _language_code(loc) in available:
        return _language_code(loc)

    return DEFAULT_LANGUAGE


def setup_i18n(lang: Optional[str] = None) -> Callable[[str], str]:
    """
    Install the catalog for `lang` and return its gettext function.

    With no `lang` the language is detected from the environment. Unknown
    codes fall back to English.
    """
    global _translate

    code = _language_code(lang) if lang else detect_system_language()
    if code not in available_languages():
        code = DEFAULT_LANGUAGE

    translation = gettext.translation(DOMAIN, localedir=get_locales_dir(), languages=[code], fallback=True)
    _translate = translation.gettext
    return _translate


def _(message: str) -> str:
    """Translate a message through the active catalog."""
    if _translate is None:
        setup_i18n()
    return _translate(message)
