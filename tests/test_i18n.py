from __future__ import annotations

import logging
import sys
import threading

import pytest

from lingo.core.errors import InvalidDictionaryError
from lingo.core import i18n
from lingo.core.i18n import Resolver, lookup


# ── resolution order ─────────────────────────────────────────────────────────

def test_active_locale_leaf(resolver):
    assert resolver.translate("menu.play") == "Jouer"


def test_placeholder_substitution(resolver):
    out = resolver.translate("mods.card.remove_success", {"modName": "SuperMod"})
    assert out == "SuperMod supprimé"


def test_placeholder_left_when_param_missing(resolver):
    assert resolver.translate("mods.card.remove_success", {}) == "{modName} supprimé"
    assert resolver.translate("mods.card.remove_success") == "{modName} supprimé"


def test_missing_everywhere_returns_key(resolver):
    assert resolver.translate("mods.card.nonexistent_key") == "mods.card.nonexistent_key"


def test_falls_back_per_key(resolver):
    assert resolver.translate("settings.language") == "Language"
    # the next key still comes from the active locale
    assert resolver.translate("menu.settings") == "Paramètres"


def test_mapping_is_not_a_leaf(resolver):
    assert resolver.translate("mods.card") == "mods.card"
    assert resolver.translate("menu") == "menu"


def test_leaf_mid_path_is_missing(resolver):
    assert resolver.translate("menu.play.extra") == "menu.play.extra"


@pytest.mark.parametrize("key", ["", ".", "menu.", ".menu.play", "menu..play"])
def test_malformed_key_paths(resolver, key):
    assert resolver.translate(key) == key


def test_fallback_used_when_active_has_wrong_shape():
    r = Resolver(active="fr", fallback="en")
    r.load_dictionary("en", {"menu": {"play": "Play"}})
    r.load_dictionary("fr", {"menu": "Menu"})
    assert r.translate("menu.play") == "Play"


def test_fallback_placeholders_substituted(resolver):
    r = resolver
    r.load_dictionary("fr", {"menu": {"play": "Jouer"}})
    assert r.translate("mods.card.remove_success", {"modName": "X"}) == "Removed X"


def test_translate_is_idempotent(resolver):
    params = {"modName": "SuperMod"}
    first = resolver.translate("mods.card.remove_success", params)
    assert all(resolver.translate("mods.card.remove_success", params) == first for _ in range(5))


def test_t_alias(resolver):
    assert resolver.t("menu.play") == "Jouer"


def test_unloaded_active_locale_uses_fallback():
    r = Resolver(active="fr", fallback="en")
    r.load_dictionary("en", {"menu": {"play": "Play"}})
    assert r.translate("menu.play") == "Play"


def test_nothing_loaded_returns_key():
    assert Resolver().translate("menu.play") == "menu.play"


# ── locale switching ─────────────────────────────────────────────────────────

def test_set_locale_switches(resolver):
    assert resolver.set_locale("en") is True
    assert resolver.active_locale == "en"
    assert resolver.translate("menu.play") == "Play"


def test_set_unknown_locale_fails(resolver):
    assert resolver.set_locale("de") is False
    assert resolver.active_locale == "fr"
    assert resolver.translate("menu.play") == "Jouer"


def test_set_fallback_locale(resolver):
    assert resolver.set_fallback_locale("de") is False
    assert resolver.fallback_locale == "en"
    resolver.load_dictionary("de", {"settings": {"language": "Sprache"}})
    assert resolver.set_fallback_locale("de") is True
    assert resolver.translate("settings.language") == "Sprache"


def test_listeners_notified_on_change(resolver):
    seen = []
    unsubscribe = resolver.subscribe(lambda old, new: seen.append((old, new)))
    resolver.set_locale("en")
    resolver.set_locale("en")
    resolver.set_locale("de")
    unsubscribe()
    resolver.set_locale("fr")
    assert seen == [("fr", "en")]


def test_failing_listener_does_not_block_change(resolver, caplog):
    seen = []

    def broken(old, new):
        raise RuntimeError("boom")

    resolver.subscribe(broken)
    resolver.subscribe(lambda old, new: seen.append(new))
    with caplog.at_level(logging.ERROR, logger="lingo.core.i18n"):
        assert resolver.set_locale("en") is True
    assert resolver.active_locale == "en"
    assert seen == ["en"]
    assert "Locale listener" in caplog.text


# ── loading ──────────────────────────────────────────────────────────────────

def test_reload_replaces_whole_tree(resolver):
    resolver.load_dictionary("fr", {"menu": {"mods": "Mods FR"}})
    assert resolver.translate("menu.mods") == "Mods FR"
    # old fr entries are gone, fallback answers instead
    assert resolver.translate("menu.play") == "Play"
    assert not resolver.has("menu.play", "fr")


def test_loaded_tree_is_isolated_from_source():
    source = {"menu": {"play": "Jouer"}}
    r = Resolver(active="fr", fallback="fr")
    r.load_dictionary("fr", source)
    source["menu"]["play"] = "Changed"
    assert r.translate("menu.play") == "Jouer"
    with pytest.raises(TypeError):
        r.dictionary("fr")["menu"]["play"] = "x"  # type: ignore[index]


def test_non_mapping_root_rejected():
    r = Resolver()
    with pytest.raises(InvalidDictionaryError):
        r.load_dictionary("fr", ["not", "a", "mapping"])  # type: ignore[arg-type]
    assert r.locales == []


def test_non_string_leaves_dropped(caplog):
    r = Resolver(active="fr", fallback="fr")
    with caplog.at_level(logging.WARNING, logger="lingo.core.i18n"):
        r.load_dictionary("fr", {"count": 3, "menu": {"play": "Jouer", "flags": [1]}})
    assert r.translate("count") == "count"
    assert r.translate("menu.flags") == "menu.flags"
    assert r.translate("menu.play") == "Jouer"
    assert "menu.flags" in caplog.text


def test_unload_dictionary(resolver):
    resolver.load_dictionary("de", {"menu": {"play": "Spielen"}})
    assert resolver.unload_dictionary("de") is True
    assert "de" not in resolver.locales
    assert resolver.unload_dictionary("fr") is False  # active
    assert resolver.unload_dictionary("en") is False  # fallback
    assert resolver.unload_dictionary("xx") is False


def test_has(resolver):
    assert resolver.has("menu.play")
    assert not resolver.has("settings.language")
    assert resolver.has("settings.language", "en")
    assert not resolver.has("menu", "en")


def test_missing_key_warned_once(resolver, caplog):
    with caplog.at_level(logging.DEBUG, logger="lingo.core.i18n"):
        resolver.translate("nope.key")
        resolver.translate("nope.key")
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "nope.key" in warnings[0].getMessage()


def test_lookup_helper():
    tree = {"a": {"b": "leaf"}}
    assert lookup(tree, "a.b") == "leaf"
    assert lookup(tree, "a") is None
    assert lookup(None, "a.b") is None


# ── concurrency ──────────────────────────────────────────────────────────────

def test_concurrent_switching_never_mixes_state():
    r = Resolver(active="fr", fallback="en")
    r.load_dictionary("en", {"greeting": "Hello"})
    r.load_dictionary("fr", {"greeting": "Bonjour"})
    stop = threading.Event()
    seen = set()

    def flip():
        while not stop.is_set():
            r.set_locale("en")
            r.set_locale("fr")

    def read():
        for _ in range(2000):
            seen.add(r.translate("greeting"))

    writer = threading.Thread(target=flip)
    writer.start()
    try:
        readers = [threading.Thread(target=read) for _ in range(4)]
        for th in readers:
            th.start()
        for th in readers:
            th.join()
    finally:
        stop.set()
        writer.join()
    assert seen <= {"Hello", "Bonjour"}


def test_reloading_while_keys_go_missing():
    previous = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    r = Resolver(active="fr", fallback="en")
    r.load_dictionary("en", {"menu": {"play": "Play"}})
    r.load_dictionary("fr", {"menu": {"play": "Jouer"}})
    errors = []

    def miss(n):
        try:
            for i in range(3000):
                assert r.translate(f"missing.{n}.{i}") == f"missing.{n}.{i}"
        except Exception as e:
            errors.append(repr(e))

    def reload():
        try:
            for _ in range(3000):
                r.load_dictionary("de", {"a": "A"})
        except Exception as e:
            errors.append(repr(e))

    threads = [threading.Thread(target=miss, args=(n,)) for n in range(4)]
    threads.append(threading.Thread(target=reload))
    try:
        for th in threads:
            th.start()
        for th in threads:
            th.join()
    finally:
        sys.setswitchinterval(previous)
    assert errors == []
    assert r.translate("menu.play") == "Jouer"


def test_reported_markers_are_bounded(monkeypatch, caplog):
    monkeypatch.setattr(i18n, "MAX_REPORTED", 3)
    r = Resolver(active="fr", fallback="en")
    with caplog.at_level(logging.WARNING, logger="lingo.core.i18n"):
        for i in range(10):
            r.translate(f"missing.{i}")
    assert len(r._reported) <= 3
    assert len([rec for rec in caplog.records if rec.levelno == logging.WARNING]) == 10
