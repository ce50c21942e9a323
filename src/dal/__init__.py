"""Data Access Layer for Specflow.

Repositories take an AsyncSession, flush their writes and leave the
commit to the caller.
"""

from src.dal.app_settings import CONSTITUTION_KEY, AppSettingsRepository
from src.dal.base import BaseRepository
from src.dal.documents import DocumentRepository
from src.dal.workflows import WorkflowRepository

__all__ = [
    "BaseRepository",
    # Workflows
    "WorkflowRepository",
    # Documents and version history
    "DocumentRepository",
    # Settings
    "AppSettingsRepository",
    "CONSTITUTION_KEY",
]
