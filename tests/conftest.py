from __future__ import annotations

import pytest

from lingo.core.config import Settings
from lingo.core.i18n import Resolver


FR = {
    "menu": {"play": "Jouer", "settings": "Paramètres"},
    "mods": {
        "card": {
            "remove_success": "{modName} supprimé",
            "button": {"install": "Installer"},
        },
    },
}

EN = {
    "menu": {"play": "Play", "settings": "Settings"},
    "mods": {
        "card": {
            "remove_success": "Removed {modName}",
            "button": {"install": "Install"},
        },
    },
    "settings": {"language": "Language"},
}


@pytest.fixture
def resolver() -> Resolver:
    r = Resolver(active="fr", fallback="en")
    r.load_dictionary("en", EN)
    r.load_dictionary("fr", FR)
    return r


@pytest.fixture
def cfg(tmp_path) -> Settings:
    return Settings(
        DEFAULT_LOCALE="fr",
        FALLBACK_LOCALE="en",
        LOCALES_DIR="",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'prefs.db'}",
        PREFERENCE_SCOPE="test",
        LOG_LEVEL="INFO",
        LOG_FILE=False,
    )
