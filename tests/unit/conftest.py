"""Unit-test conftest: no real database.

Every storage accessor is replaced with a guard that raises, both at
configure time (so route and service modules bind the guard when they
do ``from src.storage import get_session``) and per test. Tests patch
``get_session`` where it is looked up, or hand a session factory to
the service under test.

Tests that need PostgreSQL live in ``tests/integration/``.
"""

from __future__ import annotations

import pytest

import src.storage as _storage_mod

_GUARD_MESSAGE = (
    "Unit test attempted a real DB connection via {name}(). "
    "Mock the session or move the test to tests/integration/."
)


def _guard(name: str):
    def _raise(*args, **kwargs):
        raise RuntimeError(_GUARD_MESSAGE.format(name=name))

    return _raise


def _install_db_guard(monkeypatch: pytest.MonkeyPatch | None = None) -> None:
    for name in ("get_engine", "get_session_factory", "get_session"):
        if monkeypatch:
            monkeypatch.setattr(_storage_mod, name, _guard(name))
        else:
            setattr(_storage_mod, name, _guard(name))


def pytest_configure() -> None:
    """Install DB guards before unit test modules are imported."""
    _storage_mod._engine = None  # type: ignore[attr-defined]
    _storage_mod._session_factory = None  # type: ignore[attr-defined]
    _install_db_guard()


@pytest.fixture(autouse=True)
def _isolate_db(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset storage singletons and re-install the guards."""
    monkeypatch.setattr(_storage_mod, "_engine", None)
    monkeypatch.setattr(_storage_mod, "_session_factory", None)
    _install_db_guard(monkeypatch)


@pytest.fixture(autouse=True)
def _no_rate_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable the shared limiter; it keeps counts across tests."""
    from src.api.rate_limit import limiter

    monkeypatch.setattr(limiter, "enabled", False)
