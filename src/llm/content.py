"""Plain text out of chat model message content.

Providers return either a string or a list of content blocks
(``[{"type": "text", "text": "..."}]``); Gemini uses the list form,
including for streamed chunks.
"""

from typing import Any


def message_text(content: str | list[Any] | None) -> str:
    """Concatenate the text parts of a message's content.

    Non-text blocks (reasoning, tool calls, images) are dropped.

    Args:
        content: ``AIMessage.content`` or ``AIMessageChunk.content``

    Returns:
        Plain text, possibly empty
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type", "text") == "text":
            parts.append(str(block.get("text") or ""))
    return "".join(parts)
