"""Integration test fixtures using testcontainers.

Provides a real PostgreSQL container so repositories are exercised
against the database they run on in production.
"""

import os
import shutil
import subprocess


def _configure_container_runtime() -> None:
    """Auto-detect container runtime so testcontainers works with Docker or Podman.

    Detection order (first match wins):
      1. DOCKER_HOST already set.
      2. /var/run/docker.sock exists.
      3. Linux rootless Podman socket.
      4. macOS Podman machine socket via ``podman machine inspect``.
    """
    if os.environ.get("DOCKER_HOST"):
        return
    if os.path.exists("/var/run/docker.sock"):
        return

    linux_socket = f"/run/user/{os.getuid()}/podman/podman.sock"
    if os.path.exists(linux_socket):
        os.environ["DOCKER_HOST"] = f"unix://{linux_socket}"
        os.environ.setdefault("TESTCONTAINERS_RYUK_DISABLED", "true")
        return

    if shutil.which("podman"):
        try:
            result = subprocess.run(
                ["podman", "machine", "inspect", "--format", "{{.ConnectionInfo.PodmanSocket.Path}}"],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return
        sock = result.stdout.strip()
        if result.returncode == 0 and sock and os.path.exists(sock):
            os.environ["DOCKER_HOST"] = f"unix://{sock}"
            os.environ.setdefault("TESTCONTAINERS_RYUK_DISABLED", "true")


_configure_container_runtime()

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer  # noqa: E402

import src.storage.entities  # noqa: E402, F401  registers models with Base.metadata
from src.storage.models import Base  # noqa: E402

# =============================================================================
# POSTGRESQL CONTAINER
# =============================================================================


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Start one PostgreSQL container shared by the whole session."""
    try:
        container = PostgresContainer(
            image="postgres:16-alpine",
            username="test",
            password="test",
            dbname="specflow_test",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"Docker/Podman not available: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_url(postgres_container: PostgresContainer) -> str:
    """Async connection URL for the container."""
    sync_url = postgres_container.get_connection_url()
    async_url = sync_url.replace("postgresql://", "postgresql+asyncpg://")
    return async_url.replace("psycopg2", "asyncpg")


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def integration_engine(postgres_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Engine connected to the test container, with all tables created."""
    engine = create_async_engine(postgres_url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(loop_scope="session")
async def integration_session(
    integration_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession, None]:
    """Session inside a connection-level transaction that is always rolled back.

    ``session.commit()`` releases a SAVEPOINT instead of committing, so
    each test starts from an empty database.
    """
    async with integration_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)
        await session.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(session_sync: Any, transaction: Any) -> None:
            if transaction.nested and not transaction._parent.nested:
                session_sync.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest_asyncio.fixture(loop_scope="session")
async def session_maker(
    integration_engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Independent sessions that really commit, for concurrency tests.

    Tables are emptied afterwards.
    """
    yield async_sessionmaker(integration_engine, expire_on_commit=False)

    async with integration_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(table.delete())
