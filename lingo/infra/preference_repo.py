from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .models import LocalePreference


class PreferenceRepo:
    """Stored locale choice per scope (one row per user profile)."""

    def __init__(self, session: AsyncSession) -> None:
        self.s = session

    async def get_locale(self, scope: str) -> Optional[str]:
        row = await self.s.get(LocalePreference, scope)
        return row.locale if row else None

    async def set_locale(self, scope: str, locale: str) -> None:
        row = await self.s.get(LocalePreference, scope)
        if row is None:
            self.s.add(LocalePreference(scope=scope, locale=locale))
        else:
            row.locale = locale

    async def clear(self, scope: str) -> bool:
        row = await self.s.get(LocalePreference, scope)
        if row is None:
            return False
        await self.s.delete(row)
        return True
