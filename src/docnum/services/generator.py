"""SequenceGenerator — collision-safe local number generation.

Composes the config/counter/used-number stores with the pure formatter
and reset policy. Generation follows four steps per call:

1. Ensure the config exists (lazy seed from defaults).
2. Apply a pending calendar reset, if any.
3. Probe candidates ``last_number + 1, + 2, ...`` until one is not in the
   used-number index, giving up after ``max_attempts``.
4. Advance the counter by the number of attempts and mark the candidate
   used, in one atomic backend write.

Steps 1-4 run under a per-type lock and inside one backend transaction.
The lock orders threads of this process; the transaction orders every
generator sharing the store, including other processes on the same
database file. Skipped integers are burned: the counter advances by
*attempts*, not by one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from docnum.domain.defaults import known_default_types
from docnum.domain.errors import ConfigurationError, ExhaustedSequenceError, NumberingError
from docnum.domain.formatting import format_number, matches_shape
from docnum.domain.reset import apply_reset, should_reset
from docnum.domain.types import CounterState, NumberFormat, SequenceConfig
from docnum.infrastructure.stores import (
    CounterStore,
    SequenceConfigStore,
    UsedNumberIndex,
    stored_types,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from docnum.infrastructure.backends import KeyValueBackend

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SequenceStatistics:
    """Advisory snapshot of one number type (read without locking)."""

    number_type: str
    last_number: int
    used_count: int
    next_preview: str | None
    last_reset_date: datetime | None
    config: SequenceConfig

    @property
    def total_generated(self) -> int:
        return self.last_number

    def to_dict(self) -> dict[str, Any]:
        return {
            "number_type": self.number_type,
            "last_number": self.last_number,
            "total_generated": self.total_generated,
            "used_count": self.used_count,
            "next_preview": self.next_preview,
            "last_reset_date": (
                self.last_reset_date.isoformat() if self.last_reset_date else None
            ),
            "config": self.config.model_dump(mode="json"),
        }


class SequenceGenerator:
    """Local numbering authority over an injected key-value backend.

    Args:
        backend: Persistence for config, counter, and used-number records.
        overrides: Per-type partial configs merged over the built-in defaults.
        max_attempts: Upper bound of the collision loop.
        clock: Source of "now"; injected so resets and date tokens are testable.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Clock | None = None,
    ) -> None:
        if max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {max_attempts}"
            raise ValueError(msg)
        self._backend = backend
        self.configs = SequenceConfigStore(backend, overrides)
        self.counters = CounterStore(backend)
        self.used = UsedNumberIndex(backend)
        self.max_attempts = max_attempts
        self._clock = clock or utc_now
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, number_type: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(number_type)
            if lock is None:
                lock = threading.RLock()
                self._locks[number_type] = lock
            return lock

    @contextmanager
    def _exclusive(self, number_type: str) -> Iterator[None]:
        with self._lock(number_type), self._backend.transaction():
            yield

    def _ensure_counter(self, number_type: str, config: SequenceConfig) -> CounterState:
        counter = self.counters.get(number_type)
        if counter is None:
            counter = CounterState.initial(config)
            self.counters.put(number_type, counter)
        return counter

    def _find_candidate(
        self,
        number_type: str,
        config: SequenceConfig,
        last_number: int,
        now: datetime,
        used: set[str],
    ) -> tuple[str, int]:
        """Return ``(candidate, attempts)`` for the first unused candidate."""
        for attempts in range(1, self.max_attempts + 1):
            candidate = format_number(config, last_number + attempts, now)
            if candidate not in used:
                return candidate, attempts
        raise ExhaustedSequenceError(number_type, self.max_attempts)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def generate_next_number(self, number_type: str) -> str:
        """Issue the next unique number for *number_type*.

        Raises:
            ConfigurationError: The config cannot render a number.
            ExhaustedSequenceError: ``max_attempts`` consecutive candidates
                were already used. Nothing is written in that case.
            PersistenceError: The backend failed.
        """
        with self._exclusive(number_type):
            now = self._clock()
            config = self.configs.get(number_type)
            counter = self._ensure_counter(number_type, config)

            if should_reset(counter, config, now):
                counter = apply_reset(config, now)
                self.counters.put(number_type, counter)
                logger.info(
                    "Reset %s counter to %d (%s)",
                    number_type,
                    counter.last_number,
                    config.reset_frequency,
                )

            used = self.used.all(number_type)
            candidate, attempts = self._find_candidate(
                number_type, config, counter.last_number, now, used
            )

            advanced = counter.model_copy(
                update={
                    "last_number": counter.last_number + attempts,
                    "reset_frequency": config.reset_frequency,
                }
            )
            used.add(candidate)
            self._backend.put_many(
                dict(
                    [
                        self.counters.record(number_type, advanced),
                        self.used.record(number_type, used),
                    ]
                )
            )

        if attempts > 1:
            logger.warning(
                "Skipped %d used %s candidates before issuing %s",
                attempts - 1,
                number_type,
                candidate,
            )
        logger.debug("Generated %s number %s", number_type, candidate)
        return candidate

    def reserve_number(self, number_type: str, value: str) -> bool:
        """Mark *value* as used without advancing the counter.

        Returns False (and changes nothing) if it is already used.

        Raises:
            ConfigurationError: *value* does not have the configured shape.
        """
        with self._exclusive(number_type):
            config = self.configs.get(number_type)
            if not matches_shape(config, value, self._clock()):
                msg = f"Invalid {number_type} number format: {value!r}"
                raise ConfigurationError(msg)

            used = self.used.all(number_type)
            if value in used:
                return False
            used.add(value)
            self.used.put(number_type, used)

        logger.info("Reserved %s number %s", number_type, value)
        return True

    def release_number(self, number_type: str, value: str) -> None:
        """Remove *value* from the used index. No-op if absent; counter untouched."""
        with self._exclusive(number_type):
            self.used.remove(number_type, value)
        logger.info("Released %s number %s", number_type, value)

    def preview_next_numbers(self, number_type: str, count: int = 5) -> list[str]:
        """Simulate the next *count* generations without writing anything.

        A pending reset is taken into account and each preview skips
        used numbers and the previews before it.
        """
        if count <= 0:
            return []
        now = self._clock()
        config = self.configs.peek(number_type)
        counter = self.counters.get(number_type) or CounterState.initial(config)

        last_number = counter.last_number
        if should_reset(counter, config, now):
            last_number = config.starting_number - 1

        used = self.used.all(number_type)
        previews: list[str] = []
        for _ in range(count):
            candidate, attempts = self._find_candidate(
                number_type, config, last_number, now, used
            )
            previews.append(candidate)
            used.add(candidate)
            last_number += attempts
        return previews

    # ------------------------------------------------------------------
    # Validation and lookup
    # ------------------------------------------------------------------

    def validate_number_format(self, number_type: str, value: str) -> bool:
        try:
            return matches_shape(self.configs.peek(number_type), value, self._clock())
        except ConfigurationError:
            return False

    def is_number_used(self, number_type: str, value: str) -> bool:
        return self.used.contains(number_type, value)

    def known_types(self) -> list[str]:
        """Built-in types in table order, then any other persisted type."""
        defaults = known_default_types()
        extra = sorted(stored_types(self._backend) - set(defaults))
        return defaults + extra

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self, number_type: str) -> SequenceConfig:
        return self.configs.get(number_type)

    def update_config(self, number_type: str, **changes: Any) -> SequenceConfig:
        """Apply a partial config update and persist it.

        If the new starting number lies beyond the counter, the counter is
        moved up to keep ``last_number >= starting_number - 1``.

        Raises:
            ConfigurationError: The merged config is invalid.
        """
        with self._exclusive(number_type):
            current = self.configs.get(number_type)
            try:
                updated = SequenceConfig.model_validate({**current.model_dump(), **changes})
            except ValidationError as exc:
                msg = f"Invalid {number_type} configuration: {exc}"
                raise ConfigurationError(msg) from exc

            if updated.format == NumberFormat.CUSTOM and not updated.custom_pattern:
                msg = "Custom pattern is required for custom format"
                raise ConfigurationError(msg)

            self.configs.put(number_type, updated)

            counter = self._ensure_counter(number_type, updated)
            floor = updated.starting_number - 1
            if counter.last_number < floor:
                self.counters.put(
                    number_type, counter.model_copy(update={"last_number": floor})
                )

        logger.info("Updated %s configuration: %s", number_type, sorted(changes))
        return updated

    def initialize(self, number_type: str) -> SequenceConfig:
        """Seed config and counter for *number_type* if they are missing."""
        with self._exclusive(number_type):
            config = self.configs.get(number_type)
            self._ensure_counter(number_type, config)
        return config

    def initialize_all(self) -> list[str]:
        types = known_default_types()
        for number_type in types:
            self.initialize(number_type)
        return types

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self, number_type: str) -> SequenceStatistics:
        config = self.configs.peek(number_type)
        counter = self.counters.get(number_type) or CounterState.initial(config)
        try:
            preview = self.preview_next_numbers(number_type, 1)
        except NumberingError:
            logger.debug("No preview available for %s", number_type, exc_info=True)
            preview = []
        return SequenceStatistics(
            number_type=number_type,
            last_number=counter.last_number,
            used_count=self.used.count(number_type),
            next_preview=preview[0] if preview else None,
            last_reset_date=counter.last_reset_date,
            config=config,
        )

    def get_all_statistics(self) -> dict[str, SequenceStatistics]:
        return {t: self.get_statistics(t) for t in self.known_types()}

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def reset_numbering_system(self, number_type: str, *, keep_config: bool = False) -> None:
        """Clear counter and used index, then re-initialize.

        The config is re-seeded from defaults unless *keep_config* is set.
        """
        with self._exclusive(number_type):
            self.counters.delete(number_type)
            self.used.clear(number_type)
            if not keep_config:
                self.configs.delete(number_type)
            self.initialize(number_type)
        logger.warning("Numbering system for %s was reset", number_type)

    def reset_all_numbering_systems(self, *, keep_config: bool = False) -> list[str]:
        types = self.known_types()
        for number_type in types:
            self.reset_numbering_system(number_type, keep_config=keep_config)
        return types

    def import_used_numbers(self, number_type: str, values: Iterable[str]) -> int:
        """Add historical numbers to the used index.

        Values that do not match the configured shape are skipped.
        Returns how many values were accepted.
        """
        with self._exclusive(number_type):
            config = self.configs.get(number_type)
            now = self._clock()
            used = self.used.all(number_type)
            accepted = 0
            for value in values:
                if matches_shape(config, value, now):
                    used.add(value)
                    accepted += 1
                else:
                    logger.warning("Skipping malformed %s number %r", number_type, value)
            self.used.put(number_type, used)
        logger.info("Imported %d %s numbers", accepted, number_type)
        return accepted

    def export_used_numbers(self, number_type: str) -> list[str]:
        return sorted(self.used.all(number_type))

    def export_all_used_numbers(self) -> dict[str, list[str]]:
        return {t: self.export_used_numbers(t) for t in self.known_types()}
