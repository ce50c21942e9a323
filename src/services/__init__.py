"""Application services.

- ``executor``: agent execution (render, stream, persist)
- ``review``: structured validation and recommendation calls
"""

from src.services.executor import ExecutionRun, WorkflowExecutor
from src.services.review import ReviewService

__all__ = [
    "ExecutionRun",
    "ReviewService",
    "WorkflowExecutor",
]
