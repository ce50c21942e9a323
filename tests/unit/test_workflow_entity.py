"""Unit tests for workflow and document entities."""

import pytest

from src.storage.entities import (
    VALID_WORKFLOW_TRANSITIONS,
    Document,
    DocumentVersion,
    Workflow,
    WorkflowStatus,
)
from src.storage.models import Base
from tests.factories import DocumentFactory, WorkflowFactory


class TestWorkflowStatus:
    def test_values(self):
        assert [s.value for s in WorkflowStatus] == [
            "draft",
            "in_progress",
            "completed",
            "error",
        ]

    def test_transition_table(self):
        assert VALID_WORKFLOW_TRANSITIONS == {
            WorkflowStatus.DRAFT: {WorkflowStatus.IN_PROGRESS},
            WorkflowStatus.IN_PROGRESS: {WorkflowStatus.COMPLETED, WorkflowStatus.ERROR},
            WorkflowStatus.COMPLETED: {WorkflowStatus.IN_PROGRESS},
            WorkflowStatus.ERROR: {WorkflowStatus.IN_PROGRESS},
        }


class TestCanTransitionTo:
    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            ("draft", WorkflowStatus.IN_PROGRESS, True),
            ("draft", WorkflowStatus.COMPLETED, False),
            ("in_progress", WorkflowStatus.IN_PROGRESS, False),
            ("in_progress", WorkflowStatus.COMPLETED, True),
            ("in_progress", WorkflowStatus.ERROR, True),
            ("completed", WorkflowStatus.IN_PROGRESS, True),
            ("completed", WorkflowStatus.ERROR, False),
            ("error", WorkflowStatus.IN_PROGRESS, True),
            ("error", WorkflowStatus.DRAFT, False),
        ],
    )
    def test_matrix(self, current, target, allowed):
        workflow = WorkflowFactory(status=current)
        assert workflow.can_transition_to(target) is allowed

    def test_repr(self):
        workflow = WorkflowFactory(name="Billing")
        assert "Billing" in repr(workflow)
        assert "draft" in repr(workflow)


class TestTables:
    def test_table_names(self):
        assert Workflow.__tablename__ == "workflow"
        assert Document.__tablename__ == "document"
        assert DocumentVersion.__tablename__ == "document_version"
        assert {"workflow", "document", "document_version", "app_setting"} <= set(
            Base.metadata.tables
        )

    def test_document_fk_cascades(self):
        fk = next(iter(Base.metadata.tables["document"].c.workflow_id.foreign_keys))
        assert fk.ondelete == "CASCADE"

    def test_version_fk_cascades(self):
        fk = next(iter(Base.metadata.tables["document_version"].c.document_id.foreign_keys))
        assert fk.ondelete == "CASCADE"

    def test_version_unique_per_document(self):
        table = Base.metadata.tables["document_version"]
        uniques = [
            {c.name for c in constraint.columns}
            for constraint in table.constraints
            if constraint.__class__.__name__ == "UniqueConstraint"
        ]
        assert {"document_id", "version"} in uniques


class TestSnapshot:
    def test_snapshot_copies_live_state(self):
        document = DocumentFactory(version=3, content="live text")
        snapshot = DocumentVersion.snapshot(document)

        assert snapshot.document_id == document.id
        assert snapshot.version == 3
        assert snapshot.content == "live text"
        assert snapshot.id and snapshot.id != document.id
