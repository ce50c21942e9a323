"""Specflow exception hierarchy.

Base exceptions for all application layers with correlation ID support.

Usage:
    from src.exceptions import LLMError, NotFoundError

    try:
        document = await service.validate_document(document_id)
    except NotFoundError as e:
        logger.warning("Missing %s (correlation_id=%s)", e.resource, e.correlation_id)
"""

import uuid


class SpecflowError(Exception):
    """Base exception for all Specflow application errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class AgentError(SpecflowError):
    """Errors from agent catalog or prompt rendering."""

    def __init__(self, message: str, *, agent_type: str | None = None, **kwargs):
        self.agent_type = agent_type
        super().__init__(message, **kwargs)


class DALError(SpecflowError):
    """Errors from data access layer operations."""

    pass


class NotFoundError(DALError):
    """A requested workflow, document or version does not exist."""

    def __init__(self, message: str, *, resource: str | None = None, **kwargs):
        self.resource = resource
        super().__init__(message, **kwargs)


class InvalidTransitionError(SpecflowError):
    """A workflow status change that the state machine does not allow."""

    def __init__(self, message: str, *, current: str, target: str, **kwargs):
        self.current = current
        self.target = target
        super().__init__(message, **kwargs)


class LLMError(SpecflowError):
    """Errors from LLM provider operations."""

    def __init__(self, message: str, *, provider: str | None = None, **kwargs):
        self.provider = provider
        super().__init__(message, **kwargs)


class ValidationError(SpecflowError):
    """Errors from input validation (beyond Pydantic)."""

    pass


class ConfigurationError(SpecflowError):
    """Errors from application configuration."""

    pass
