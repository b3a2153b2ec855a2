"""Typed stores over a :class:`KeyValueBackend`.

Three independent logical records per number type:

- ``config:{type}``  — :class:`SequenceConfig`
- ``counter:{type}`` — :class:`CounterState`
- ``used:{type}``    — sorted JSON array of issued/reserved strings

The stores are owned by the SequenceGenerator. Nothing else writes them.
Each store can also build a ``(key, value)`` record so the generator can
commit several records through one ``put_many`` call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from docnum.domain.defaults import default_config
from docnum.domain.errors import PersistenceError
from docnum.domain.types import CounterState, SequenceConfig

if TYPE_CHECKING:
    from docnum.infrastructure.backends import KeyValueBackend

logger = logging.getLogger(__name__)

CONFIG_PREFIX = "config:"
COUNTER_PREFIX = "counter:"
USED_PREFIX = "used:"


def config_key(number_type: str) -> str:
    return f"{CONFIG_PREFIX}{number_type}"


def counter_key(number_type: str) -> str:
    return f"{COUNTER_PREFIX}{number_type}"


def used_key(number_type: str) -> str:
    return f"{USED_PREFIX}{number_type}"


def stored_types(backend: KeyValueBackend) -> set[str]:
    """Every number type with at least one persisted record."""
    found: set[str] = set()
    for prefix in (CONFIG_PREFIX, COUNTER_PREFIX, USED_PREFIX):
        found.update(key[len(prefix) :] for key in backend.keys(prefix))
    return found


class SequenceConfigStore:
    """Per-type configuration with idempotent lazy initialization."""

    def __init__(
        self,
        backend: KeyValueBackend,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self._backend = backend
        self._overrides = dict(overrides or {})

    def default(self, number_type: str) -> SequenceConfig:
        """The seed config for *number_type* (built-in table plus overrides)."""
        return default_config(number_type, self._overrides)

    def _load(self, number_type: str) -> SequenceConfig | None:
        raw = self._backend.get(config_key(number_type))
        if raw is None:
            return None
        try:
            return SequenceConfig.model_validate(raw)
        except ValidationError as exc:
            msg = f"Stored config for {number_type!r} is invalid: {exc}"
            raise PersistenceError(msg) from exc

    def exists(self, number_type: str) -> bool:
        return self._backend.get(config_key(number_type)) is not None

    def get(self, number_type: str) -> SequenceConfig:
        """Return the stored config, seeding and persisting the default if absent."""
        config = self._load(number_type)
        if config is None:
            config = self.default(number_type)
            self.put(number_type, config)
            logger.debug("Seeded %s config from defaults", number_type)
        return config

    def peek(self, number_type: str) -> SequenceConfig:
        """Return the stored config or the default, without persisting anything."""
        return self._load(number_type) or self.default(number_type)

    def put(self, number_type: str, config: SequenceConfig) -> None:
        self._backend.put(config_key(number_type), config.to_record())

    def delete(self, number_type: str) -> None:
        self._backend.delete(config_key(number_type))


class CounterStore:
    """Per-type last-issued integer and last reset timestamp."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    def get(self, number_type: str) -> CounterState | None:
        raw = self._backend.get(counter_key(number_type))
        if raw is None:
            return None
        try:
            return CounterState.model_validate(raw)
        except ValidationError as exc:
            msg = f"Stored counter for {number_type!r} is invalid: {exc}"
            raise PersistenceError(msg) from exc

    def record(self, number_type: str, counter: CounterState) -> tuple[str, Any]:
        return counter_key(number_type), counter.to_record()

    def put(self, number_type: str, counter: CounterState) -> None:
        self._backend.put(*self.record(number_type, counter))

    def delete(self, number_type: str) -> None:
        self._backend.delete(counter_key(number_type))


class UsedNumberIndex:
    """Per-type set of every formatted number issued or reserved.

    INVARIANT: membership is append-only except through :meth:`remove`
    (explicit release) and :meth:`clear` (full reset).
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    def all(self, number_type: str) -> set[str]:
        raw = self._backend.get(used_key(number_type))
        if raw is None:
            return set()
        if not isinstance(raw, list):
            msg = f"Stored used numbers for {number_type!r} are not a list"
            raise PersistenceError(msg)
        return {str(v) for v in raw}

    def contains(self, number_type: str, value: str) -> bool:
        return value in self.all(number_type)

    def count(self, number_type: str) -> int:
        return len(self.all(number_type))

    def record(self, number_type: str, values: Iterable[str]) -> tuple[str, Any]:
        return used_key(number_type), sorted(set(values))

    def put(self, number_type: str, values: Iterable[str]) -> None:
        self._backend.put(*self.record(number_type, values))

    def add(self, number_type: str, value: str) -> None:
        used = self.all(number_type)
        if value not in used:
            used.add(value)
            self.put(number_type, used)

    def remove(self, number_type: str, value: str) -> None:
        used = self.all(number_type)
        if value in used:
            used.discard(value)
            self.put(number_type, used)

    def clear(self, number_type: str) -> None:
        self._backend.delete(used_key(number_type))
