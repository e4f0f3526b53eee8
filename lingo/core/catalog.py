from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, List, Tuple

from .errors import InvalidDictionaryError
from .i18n import Resolver


log = logging.getLogger(__name__)

PACKAGED_LOCALES = "lingo.locales"


def _load_all(resolver: Resolver, entries: Iterable[Tuple[str, Any]]) -> List[str]:
    loaded: List[str] = []
    for locale, entry in entries:
        try:
            with entry.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            resolver.load_dictionary(locale, data)
        except (OSError, ValueError, InvalidDictionaryError) as e:
            log.warning("Failed to load locale %s from %s: %s", locale, entry, e)
            continue
        loaded.append(locale)
    return loaded


def load_packaged(resolver: Resolver, package: str = PACKAGED_LOCALES) -> List[str]:
    """Load every ``<locale>.json`` shipped inside ``package``."""
    root = resources.files(package)
    entries = sorted(
        (entry.name[: -len(".json")], entry)
        for entry in root.iterdir()
        if entry.is_file() and entry.name.endswith(".json")
    )
    return _load_all(resolver, entries)


def load_directory(resolver: Resolver, path: str | Path) -> List[str]:
    """Load every ``<locale>.json`` file found directly under ``path``."""
    directory = Path(path)
    if not directory.is_dir():
        log.warning("Locale directory %s does not exist", directory)
        return []
    return _load_all(resolver, ((p.stem, p) for p in sorted(directory.glob("*.json"))))
