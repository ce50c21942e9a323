"""App settings data access layer.

Key/value settings edited through the API. The constitution is the
only key in use; it is read once per request and passed explicitly to
prompt rendering.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert

from src.storage.entities.app_setting import AppSetting

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

CONSTITUTION_KEY = "constitution"


class AppSettingsRepository:
    """Repository for key/value app settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> AppSetting | None:
        """Get a setting row by key."""
        result = await self.session.execute(select(AppSetting).where(AppSetting.key == key))
        return result.scalar_one_or_none()

    async def get_value(self, key: str, default: str = "") -> str:
        """Get a setting value, or ``default`` if it was never saved."""
        setting = await self.get(key)
        if setting is None:
            return default
        return setting.value

    async def set_value(self, key: str, value: str) -> AppSetting:
        """Create or overwrite a setting.

        A single ``INSERT ... ON CONFLICT (key) DO UPDATE`` so two first
        saves of the same key cannot both insert.
        """
        stmt = insert(AppSetting).values(id=str(uuid4()), key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={"value": stmt.excluded.value, "updated_at": datetime.now(UTC)},
        )
        result = await self.session.execute(
            stmt.returning(AppSetting).execution_options(populate_existing=True)
        )
        setting = result.scalar_one()
        logger.info("Saved app setting %s (%d chars)", key, len(value))
        return setting

    async def get_constitution(self) -> str:
        """The constitution text; empty string when never saved."""
        return await self.get_value(CONSTITUTION_KEY)

    async def set_constitution(self, content: str) -> AppSetting:
        """Overwrite the constitution."""
        return await self.set_value(CONSTITUTION_KEY, content)
