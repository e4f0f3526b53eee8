from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from .errors import InvalidDictionaryError
from .placeholders import substitute


log = logging.getLogger(__name__)

KEY_SEPARATOR = "."

# Missing-key markers kept for warn-once logging; cleared when full.
MAX_REPORTED = 4096

LocaleListener = Callable[[str, str], None]


def freeze(node: Mapping[str, Any], locale: str, path: str = "") -> Mapping[str, Any]:
    """Deep-copy ``node`` into read-only mappings, dropping non-string leaves."""
    frozen: Dict[str, Any] = {}
    for seg, child in node.items():
        key_path = f"{path}{KEY_SEPARATOR}{seg}" if path else str(seg)
        if isinstance(child, str):
            frozen[str(seg)] = child
        elif isinstance(child, Mapping):
            frozen[str(seg)] = freeze(child, locale, key_path)
        else:
            log.warning(
                "Dropping non-string entry %s in locale %s (%s)",
                key_path, locale, type(child).__name__,
            )
    return MappingProxyType(frozen)


def count_leaves(node: Mapping[str, Any]) -> int:
    return sum(count_leaves(v) if isinstance(v, Mapping) else 1 for v in node.values())


def lookup(tree: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    """Walk ``tree`` along the segments of ``key``.

    Returns the leaf string, or ``None`` when the path is missing, ends on a
    mapping, or runs into a leaf before the last segment.
    """
    if tree is None or not key:
        return None
    node: Any = tree
    for seg in key.split(KEY_SEPARATOR):
        if not isinstance(node, Mapping):
            return None
        node = node.get(seg)
        if node is None:
            return None
    return node if isinstance(node, str) else None


@dataclass(frozen=True)
class _State:
    active: str
    fallback: str
    dictionaries: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )


class Resolver:
    """Resolves dotted keys against per-locale catalogs.

    All locale state lives in one immutable snapshot. Writers build a new
    snapshot and swap it in under ``_lock``; ``translate`` reads the
    reference once, so it never sees a half-applied change.
    """

    def __init__(self, active: str = "en", fallback: str = "en") -> None:
        self._state = _State(active=active, fallback=fallback)
        self._lock = threading.Lock()
        self._listeners: List[LocaleListener] = []
        self._reported: Set[Tuple[str, str]] = set()
        self._reported_lock = threading.Lock()

    # -- accessors ---------------------------------------------------------

    @property
    def active_locale(self) -> str:
        return self._state.active

    @property
    def fallback_locale(self) -> str:
        return self._state.fallback

    @property
    def locales(self) -> List[str]:
        return sorted(self._state.dictionaries)

    def dictionary(self, locale: str) -> Optional[Mapping[str, Any]]:
        return self._state.dictionaries.get(locale)

    # -- catalog management ------------------------------------------------

    def load_dictionary(self, locale: str, data: Mapping[str, Any]) -> None:
        """Register ``data`` for ``locale``, replacing any previous catalog."""
        if not isinstance(data, Mapping):
            raise InvalidDictionaryError(locale, data)
        tree = freeze(data, locale)
        with self._lock:
            replaced = locale in self._state.dictionaries
            tables = dict(self._state.dictionaries)
            tables[locale] = tree
            self._state = replace(self._state, dictionaries=MappingProxyType(tables))
        with self._reported_lock:
            self._reported = {r for r in self._reported if r[0] != locale}
        log.info(
            "%s locale %s (%d strings)",
            "Replaced" if replaced else "Loaded", locale, count_leaves(tree),
        )

    def unload_dictionary(self, locale: str) -> bool:
        with self._lock:
            state = self._state
            if locale not in state.dictionaries or locale in (state.active, state.fallback):
                return False
            tables = dict(state.dictionaries)
            del tables[locale]
            self._state = replace(state, dictionaries=MappingProxyType(tables))
        log.info("Unloaded locale %s", locale)
        return True

    # -- locale switching --------------------------------------------------

    def set_locale(self, locale: str) -> bool:
        """Make ``locale`` the active locale.

        Returns ``False`` and leaves the state untouched when no catalog is
        loaded for ``locale``.
        """
        with self._lock:
            state = self._state
            if locale not in state.dictionaries:
                log.warning("Cannot switch to locale %r: not loaded", locale)
                return False
            previous = state.active
            self._state = replace(state, active=locale)
        if previous != locale:
            log.info("Active locale changed %s -> %s", previous, locale)
            self._notify(previous, locale)
        return True

    def set_fallback_locale(self, locale: str) -> bool:
        with self._lock:
            state = self._state
            if locale not in state.dictionaries:
                log.warning("Cannot use %r as fallback locale: not loaded", locale)
                return False
            self._state = replace(state, fallback=locale)
        return True

    def subscribe(self, listener: LocaleListener) -> Callable[[], None]:
        """Call ``listener(old, new)`` after every active locale change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, previous: str, current: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                log.exception("Locale listener %r failed", listener)

    # -- resolution --------------------------------------------------------

    def has(self, key: str, locale: Optional[str] = None) -> bool:
        state = self._state
        return lookup(state.dictionaries.get(locale or state.active), key) is not None

    def translate(self, key: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Resolve ``key`` to display text.

        Order: active locale, then fallback locale, then the key itself.
        Placeholders without a value in ``params`` stay in the output as-is.
        """
        state = self._state
        text = lookup(state.dictionaries.get(state.active), key)
        if text is None and state.fallback != state.active:
            text = lookup(state.dictionaries.get(state.fallback), key)
            if text is not None:
                log.debug("Key %s resolved from fallback %s", key, state.fallback)
        if text is None:
            self._report_missing(state, key)
            return key
        return substitute(text, params)

    t = translate

    def _report_missing(self, state: _State, key: str) -> None:
        marker = (state.active, key)
        with self._reported_lock:
            seen = marker in self._reported
            if not seen:
                if len(self._reported) >= MAX_REPORTED:
                    self._reported.clear()
                self._reported.add(marker)
        if seen:
            log.debug("Missing translation %s (locale=%s)", key, state.active)
            return
        log.warning(
            "Missing translation %s (locale=%s, fallback=%s)",
            key, state.active, state.fallback,
        )
