from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Set


# Only well-formed names are placeholders; anything else between braces is text.
_TOKEN_RE = re.compile(r"\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)\}")


def placeholder_names(text: str) -> Set[str]:
    """Return the set of placeholder names referenced by ``text``."""
    return {m.group("name") for m in _TOKEN_RE.finditer(text)}


def substitute(text: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Replace ``{name}`` tokens with values from ``params``.

    Tokens without a matching entry are left as they are so the gap stays
    visible. Substitution is a single pass: braces inside a substituted value
    are never expanded again.
    """
    if not params or "{" not in text:
        return text

    def _replace(match: "re.Match[str]") -> str:
        name = match.group("name")
        if name in params:
            return str(params[name])
        return match.group(0)

    return _TOKEN_RE.sub(_replace, text)
