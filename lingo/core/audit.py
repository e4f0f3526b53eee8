"""Catalog consistency checks.

Every locale is expected to mirror the structure of the fallback locale.
Deviations never break resolution (the resolver degrades to the fallback or
to the raw key) but they show up as untranslated text, so translators and
developers want them listed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping

from .i18n import KEY_SEPARATOR, Resolver
from .placeholders import placeholder_names


MISSING = "missing"
EXTRA = "extra"
SHAPE = "shape"
PLACEHOLDERS = "placeholders"


@dataclass(frozen=True)
class Issue:
    locale: str
    key: str
    kind: str
    detail: str = ""

    def __str__(self) -> str:
        text = f"[{self.locale}] {self.kind}: {self.key}"
        return f"{text} ({self.detail})" if self.detail else text


def _join(path: str, seg: str) -> str:
    return f"{path}{KEY_SEPARATOR}{seg}" if path else seg


def _leaves(node: Mapping[str, Any], path: str = "") -> Iterator[str]:
    for seg, child in node.items():
        if isinstance(child, Mapping):
            yield from _leaves(child, _join(path, seg))
        else:
            yield _join(path, seg)


def _walk(
    locale: str,
    ref: Mapping[str, Any],
    cand: Mapping[str, Any],
    path: str,
    out: List[Issue],
) -> None:
    for seg, ref_child in ref.items():
        key = _join(path, seg)
        if seg not in cand:
            if isinstance(ref_child, Mapping):
                out.extend(Issue(locale, k, MISSING) for k in _leaves(ref_child, key))
            else:
                out.append(Issue(locale, key, MISSING))
            continue
        cand_child = cand[seg]
        ref_is_map = isinstance(ref_child, Mapping)
        if ref_is_map != isinstance(cand_child, Mapping):
            expected = "mapping" if ref_is_map else "string"
            out.append(Issue(locale, key, SHAPE, f"expected {expected}"))
        elif ref_is_map:
            _walk(locale, ref_child, cand_child, key, out)
        else:
            want = placeholder_names(ref_child)
            got = placeholder_names(cand_child)
            if want != got:
                out.append(Issue(
                    locale, key, PLACEHOLDERS,
                    f"expected {sorted(want)}, found {sorted(got)}",
                ))
    for seg, cand_child in cand.items():
        if seg in ref:
            continue
        key = _join(path, seg)
        if isinstance(cand_child, Mapping):
            out.extend(Issue(locale, k, EXTRA) for k in _leaves(cand_child, key))
        else:
            out.append(Issue(locale, key, EXTRA))


def audit(locale: str, reference: Mapping[str, Any], candidate: Mapping[str, Any]) -> List[Issue]:
    """Compare ``candidate`` (the catalog for ``locale``) against ``reference``."""
    issues: List[Issue] = []
    _walk(locale, reference, candidate, "", issues)
    return issues


def audit_resolver(resolver: Resolver) -> List[Issue]:
    """Audit every loaded locale against the resolver's fallback locale."""
    reference = resolver.dictionary(resolver.fallback_locale)
    if reference is None:
        return []
    issues: List[Issue] = []
    for locale in resolver.locales:
        if locale == resolver.fallback_locale:
            continue
        issues.extend(audit(locale, reference, resolver.dictionary(locale) or {}))
    return issues
