"""Database entity models.

All SQLAlchemy ORM models for Specflow.
"""

from src.storage.entities.app_setting import AppSetting
from src.storage.entities.document import Document
from src.storage.entities.document_version import DocumentVersion
from src.storage.entities.workflow import (
    VALID_WORKFLOW_TRANSITIONS,
    Workflow,
    WorkflowStatus,
)

__all__ = [
    # Workflows
    "Workflow",
    "WorkflowStatus",
    "VALID_WORKFLOW_TRANSITIONS",
    # Documents
    "Document",
    "DocumentVersion",
    # Settings
    "AppSetting",
]
