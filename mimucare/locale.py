"""
Locale Message Catalog

Every user-facing string lives in ``mimucare/locales/<locale>.json`` and is
looked up by a stable message id, e.g. ``symptom.headache`` or
``test.ecg.cost``. Values are either plain strings (optionally with
``str.format`` placeholders) or lists of strings (question options,
lifestyle suggestions).
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

SUPPORTED_LOCALES = ("bn", "en")
DEFAULT_LOCALE = "bn"

LOCALES_DIR = Path(__file__).parent / "locales"


def check_locale(locale: str) -> str:
    """Return ``locale`` unchanged, or raise if it is not supported."""
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(
            f"Unsupported locale: {locale!r}. "
            f"Use one of: {', '.join(SUPPORTED_LOCALES)}"
        )
    return locale


@lru_cache(maxsize=None)
def load_messages(locale: str) -> Dict[str, Any]:
    """Load (and cache) the message table for a locale."""
    check_locale(locale)
    with open(LOCALES_DIR / f"{locale}.json", encoding="utf-8") as f:
        return json.load(f)


def _lookup(message_id: str, locale: str) -> Any:
    messages = load_messages(locale)
    try:
        return messages[message_id]
    except KeyError:
        raise KeyError(f"Missing message {message_id!r} for locale {locale!r}") from None


def t(message_id: str, locale: str, **kwargs) -> str:
    """
    Resolve a message id to a localized string.

    Args:
        message_id: Stable id such as ``"specialty.neurology.reason"``
        locale: "bn" or "en"
        **kwargs: Values for ``str.format`` placeholders

    Returns:
        The localized, formatted string
    """
    value = _lookup(message_id, locale)
    if not isinstance(value, str):
        raise TypeError(f"Message {message_id!r} is a list; use t_list()")
    return value.format(**kwargs) if kwargs else value


def t_list(message_id: str, locale: str) -> List[str]:
    """Resolve a message id whose value is a list of strings."""
    value = _lookup(message_id, locale)
    if not isinstance(value, list):
        raise TypeError(f"Message {message_id!r} is a string; use t()")
    return list(value)
