"""App setting entity model.

Key/value store for runtime settings edited through the API. The only
key in use is the constitution singleton (see ``src.dal.app_settings``).
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.storage.models import Base, TimestampMixin, UUIDMixin


class AppSetting(Base, UUIDMixin, TimestampMixin):
    """A single runtime setting, overwritten in place on save."""

    __tablename__ = "app_setting"

    key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        doc="Setting key",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        doc="Setting value (free text)",
    )

    def __repr__(self) -> str:
        return f"<AppSetting(key={self.key!r})>"
