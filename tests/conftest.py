"""Shared pytest fixtures and test helpers for docnum tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from docnum.config.settings import DocnumSettings
from docnum.infrastructure.backends import MemoryKeyValueBackend
from docnum.infrastructure.database.engine import init_database
from docnum.services.generator import SequenceGenerator
from docnum.services.workspace import Workspace


class FixedClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)

    def set(self, *args: int) -> None:
        self.now = datetime(*args, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's DOCNUM_* environment out of the tests."""
    monkeypatch.delenv("DOCNUM_CONFIG", raising=False)
    monkeypatch.delenv("DOCNUM_REMOTE__ENABLED", raising=False)
    monkeypatch.delenv("DOCNUM_REMOTE__BASE_URL", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> FixedClock:
    """A clock frozen at 2024-06-15 10:00 UTC."""
    return FixedClock(datetime(2024, 6, 15, 10, 0, tzinfo=UTC))


@pytest.fixture
def backend() -> MemoryKeyValueBackend:
    return MemoryKeyValueBackend()


@pytest.fixture
def generator(backend: MemoryKeyValueBackend, clock: FixedClock) -> SequenceGenerator:
    """Generator over an in-memory backend with the fixed clock."""
    return SequenceGenerator(backend, clock=clock)


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> DocnumSettings:
    return DocnumSettings.from_cli(root=tmp_path)


@pytest.fixture
def workspace(settings: DocnumSettings, clock: FixedClock) -> Iterator[Workspace]:
    """Workspace on a temp directory, backed by SQLite, with the fixed clock."""
    ws = Workspace(settings, clock=clock)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated workspace.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test classes.
    """
    monkeypatch.chdir(tmp_path)
