"""Server-sent event framing for agent execution streams."""

import json
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from fastapi.responses import StreamingResponse

from src.api.metrics import get_metrics_collector
from src.api.schemas import DocumentResponse
from src.services.executor import ExecutionRun, WorkflowExecutor

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: dict[str, Any]) -> str:
    """Frame one event as ``data: <json>\\n\\n``."""
    return f"data: {json.dumps(event)}\n\n"


def _to_wire(event: dict[str, Any]) -> dict[str, Any]:
    if "document" not in event:
        return event
    document = DocumentResponse.model_validate(event["document"])
    return {**event, "document": document.model_dump(mode="json", by_alias=True)}


async def _relay(executor: WorkflowExecutor, run: ExecutionRun) -> AsyncIterator[str]:
    metrics = get_metrics_collector()
    outcome = "disconnected"
    try:
        async with aclosing(executor.run(run)) as events:
            async for event in events:
                if "done" in event:
                    outcome = "completed"
                elif "error" in event:
                    outcome = "error"
                yield format_sse(_to_wire(event))
    finally:
        metrics.record_generation(run.agent_type.value, outcome)


def sse_response(executor: WorkflowExecutor, run: ExecutionRun) -> StreamingResponse:
    """Stream a prepared execution as ``text/event-stream``."""
    return StreamingResponse(
        _relay(executor, run),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
