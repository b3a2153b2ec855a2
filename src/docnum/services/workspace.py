"""Workspace — the single dependency injected into every service.

Owns the database engine and the key-value backend over it, the
:class:`SequenceGenerator` and the :class:`TieredDispatcher`. One
Workspace is built per process from :class:`DocnumSettings`, so the
dispatcher's fallback flag is shared by every caller in that process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docnum.config.discovery import STATE_DIRNAME
from docnum.infrastructure.backends import SqlKeyValueBackend
from docnum.infrastructure.database.engine import init_database
from docnum.infrastructure.remote import RemoteNumberingClient
from docnum.services.dispatcher import TieredDispatcher
from docnum.services.generator import SequenceGenerator

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from docnum.config.settings import DocnumSettings
    from docnum.infrastructure.backends import KeyValueBackend
    from docnum.services.generator import Clock

logger = logging.getLogger(__name__)


class Workspace:
    """Numbering state rooted at ``{settings.root}/.docnum``.

    Constructed once at CLI startup and stored on the click context.
    Services receive it via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: DocnumSettings, *, clock: Clock | None = None) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            settings.root, db_filename=settings.engine.db_filename
        )
        self._backend = SqlKeyValueBackend(self._engine)
        self._generator = SequenceGenerator(
            self._backend,
            overrides=settings.type_overrides(),
            max_attempts=settings.engine.max_attempts,
            clock=clock,
        )

        remote = None
        remote_cfg = settings.remote
        if remote_cfg.usable and remote_cfg.base_url:
            remote = RemoteNumberingClient(
                remote_cfg.base_url,
                timeout_seconds=remote_cfg.timeout_seconds,
                api_token=remote_cfg.api_token,
            )
        elif remote_cfg.enabled:
            logger.warning("Remote numbering enabled without base_url; using local only")
        self._dispatcher = TieredDispatcher(self._generator, remote)

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def state_dir(self) -> Path:
        return self.root / STATE_DIRNAME

    @property
    def settings(self) -> DocnumSettings:
        return self._settings

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    @property
    def generator(self) -> SequenceGenerator:
        return self._generator

    @property
    def dispatcher(self) -> TieredDispatcher:
        return self._dispatcher

    def close(self) -> None:
        """Release pooled database connections."""
        self._engine.dispose()
