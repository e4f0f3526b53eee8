from __future__ import annotations

import locale as _locale
import os
from typing import Iterable, Optional


def normalize_tag(tag: str) -> str:
    """``"fr_FR.UTF-8"`` -> ``"fr-fr"``; drops encoding and ``@modifier`` parts."""
    tag = tag.strip().split(".")[0].split("@")[0]
    return tag.replace("_", "-").lower()


def pick_locale(
    candidates: Iterable[Optional[str]],
    available: Iterable[str],
    default: str,
) -> str:
    """Return the first candidate matching an available locale.

    An exact tag wins; otherwise the primary language subtag is tried
    (``fr-CA`` matches ``fr``). Empty candidates are skipped.
    """
    by_tag = {normalize_tag(code): code for code in available}
    for candidate in candidates:
        if not candidate:
            continue
        tag = normalize_tag(candidate)
        if not tag or tag in ("c", "posix"):
            continue
        if tag in by_tag:
            return by_tag[tag]
        primary = tag.split("-")[0]
        if primary in by_tag:
            return by_tag[primary]
    return default


def system_locale() -> Optional[str]:
    """Best effort guess at the user's UI language from the process locale."""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var)
        if value and value not in ("C", "POSIX"):
            return value
    try:
        code, _ = _locale.getlocale()
    except ValueError:
        return None
    return code
