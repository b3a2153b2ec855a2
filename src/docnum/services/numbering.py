"""NumberingService — the ServiceResult facade over the numbering engine.

Every method returns :class:`ServiceResult`. Engine errors become a failed
result carrying the error's code (``CONFIGURATION_ERROR``,
``SEQUENCE_EXHAUSTED``, ``PERSISTENCE_ERROR``); nothing raises to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from docnum.config.discovery import write_default_config
from docnum.domain.errors import ConfigurationError, NumberingError
from docnum.services.base import BaseService
from docnum.services.result import ServiceResult

logger = logging.getLogger(__name__)

# Optional config fields `config set` may reset to unset.
CLEARABLE_FIELDS: tuple[str, ...] = ("custom_pattern", "date_format")


class NumberingService(BaseService):
    """Issue, reserve, inspect and administer document numbers."""

    # ------------------------------------------------------------------
    # Issuing
    # ------------------------------------------------------------------

    def next_number(self, number_type: str) -> ServiceResult:
        """Issue the next local number for *number_type*."""
        op = "next_number"
        try:
            number = self._workspace.generator.generate_next_number(number_type)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(op, {"number_type": number_type, "number": number})

    def issue_number(self, category: str) -> ServiceResult:
        """Issue a number for a document *category* through the tiered dispatcher."""
        op = "issue_number"
        dispatcher = self._workspace.dispatcher
        mode_before = dispatcher.mode
        try:
            issued = dispatcher.dispatch(category)
        except NumberingError as exc:
            return self._error(op, exc, category=category)

        warnings: list[str] = []
        if mode_before != dispatcher.mode:
            warnings.append("Remote numbering failed; switched to local generation")
        return ServiceResult.success(
            op,
            {
                "category": category,
                "number_type": issued.number_type,
                "number": issued.number,
                "source": str(issued.source),
            },
            warnings,
        )

    def preview(self, number_type: str, count: int = 5) -> ServiceResult:
        op = "preview"
        try:
            numbers = self._workspace.generator.preview_next_numbers(number_type, count)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(op, {"number_type": number_type, "numbers": numbers})

    # ------------------------------------------------------------------
    # Reservation
    # ------------------------------------------------------------------

    def reserve(self, number_type: str, values: Iterable[str]) -> ServiceResult:
        """Reserve externally assigned numbers.

        All values are shape-checked first; if any is malformed nothing is
        reserved. Values already in use are reported, not treated as errors.
        """
        op = "reserve"
        generator = self._workspace.generator
        values = list(values)
        invalid = [v for v in values if not generator.validate_number_format(number_type, v)]
        if invalid:
            exc = ConfigurationError(f"Invalid {number_type} number format: {', '.join(invalid)}")
            return self._error(op, exc, number_type=number_type, invalid=invalid)

        reserved: list[str] = []
        already_used: list[str] = []
        try:
            for value in values:
                if generator.reserve_number(number_type, value):
                    reserved.append(value)
                else:
                    already_used.append(value)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type, reserved=reserved)

        warnings = [f"Already used: {value}" for value in already_used]
        return ServiceResult.success(
            op,
            {"number_type": number_type, "reserved": reserved, "already_used": already_used},
            warnings,
        )

    def release(self, number_type: str, values: Iterable[str]) -> ServiceResult:
        op = "release"
        generator = self._workspace.generator
        released: list[str] = []
        not_used: list[str] = []
        try:
            for value in values:
                if generator.is_number_used(number_type, value):
                    generator.release_number(number_type, value)
                    released.append(value)
                else:
                    not_used.append(value)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type, released=released)

        warnings = [f"Not in use: {value}" for value in not_used]
        return ServiceResult.success(
            op, {"number_type": number_type, "released": released}, warnings
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def statistics(self, number_type: str) -> ServiceResult:
        op = "statistics"
        try:
            stats = self._workspace.generator.get_statistics(number_type)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(op, stats.to_dict())

    def all_statistics(self) -> ServiceResult:
        op = "all_statistics"
        try:
            stats = self._workspace.generator.get_all_statistics()
        except NumberingError as exc:
            return self._error(op, exc)
        return ServiceResult.success(
            op,
            {
                "mode": str(self._workspace.dispatcher.mode),
                "items": [s.to_dict() for s in stats.values()],
            },
        )

    def check_remote(self) -> ServiceResult:
        """Probe the remote authority and set the dispatch mode from the answer."""
        op = "check_remote"
        workspace = self._workspace
        dispatcher = workspace.dispatcher
        if dispatcher.remote is None:
            return ServiceResult.success(
                op,
                {"configured": False, "available": False, "mode": str(dispatcher.mode)},
                ["No remote numbering authority configured"],
            )
        available = dispatcher.check_remote_availability(workspace.settings.remote.probe_token)
        return ServiceResult.success(
            op,
            {"configured": True, "available": available, "mode": str(dispatcher.mode)},
        )

    def show_config(self, number_type: str) -> ServiceResult:
        op = "show_config"
        try:
            config = self._workspace.generator.get_config(number_type)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(
            op, {"number_type": number_type, "config": config.model_dump(mode="json")}
        )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def update_config(
        self, number_type: str, *, clear: Iterable[str] = (), **changes: Any
    ) -> ServiceResult:
        """Apply the non-None *changes*; fields named in *clear* are unset.

        Only :data:`CLEARABLE_FIELDS` can be cleared.
        """
        op = "update_config"
        changes = {k: v for k, v in changes.items() if v is not None}
        for field in clear:
            if field not in CLEARABLE_FIELDS:
                msg = f"Cannot clear {field!r}; clearable fields: {list(CLEARABLE_FIELDS)}"
                return self._error(op, ConfigurationError(msg), number_type=number_type)
            if field in changes:
                msg = f"{field!r} cannot be both set and cleared"
                return self._error(op, ConfigurationError(msg), number_type=number_type)
            changes[field] = None
        if not changes:
            return self.show_config(number_type).model_copy(
                update={"op": op, "warnings": ["No changes given"]}
            )
        try:
            config = self._workspace.generator.update_config(number_type, **changes)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(
            op,
            {
                "number_type": number_type,
                "changed": sorted(changes),
                "config": config.model_dump(mode="json"),
            },
        )

    def reset(self, number_type: str, *, keep_config: bool = False) -> ServiceResult:
        op = "reset"
        generator = self._workspace.generator
        try:
            generator.reset_numbering_system(number_type, keep_config=keep_config)
            config = generator.get_config(number_type)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(
            op,
            {
                "number_type": number_type,
                "kept_config": keep_config,
                "config": config.model_dump(mode="json"),
            },
        )

    def reset_all(self, *, keep_config: bool = False) -> ServiceResult:
        op = "reset_all"
        try:
            types = self._workspace.generator.reset_all_numbering_systems(keep_config=keep_config)
        except NumberingError as exc:
            return self._error(op, exc)
        return ServiceResult.success(op, {"types": types, "count": len(types)})

    def export_used(self, number_type: str | None = None) -> ServiceResult:
        op = "export_used"
        generator = self._workspace.generator
        try:
            if number_type is None:
                used = generator.export_all_used_numbers()
            else:
                used = {number_type: generator.export_used_numbers(number_type)}
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)
        return ServiceResult.success(op, {"used": used})

    def import_used(self, number_type: str, values: Iterable[str]) -> ServiceResult:
        op = "import_used"
        values = [v.strip() for v in values if v.strip()]
        try:
            accepted = self._workspace.generator.import_used_numbers(number_type, values)
        except NumberingError as exc:
            return self._error(op, exc, number_type=number_type)

        skipped = len(values) - accepted
        warnings = [f"Skipped {skipped} malformed value(s)"] if skipped else []
        return ServiceResult.success(
            op,
            {"number_type": number_type, "accepted": accepted, "skipped": skipped},
            warnings,
        )

    def init(self, *, write_config: bool = True) -> ServiceResult:
        """Create the state directory, seed every built-in type, write docnum.toml."""
        op = "init"
        workspace = self._workspace
        try:
            types = workspace.generator.initialize_all()
        except NumberingError as exc:
            return self._error(op, exc)

        written = write_default_config(workspace.root) if write_config else None
        warnings: list[str] = []
        if write_config and written is None:
            warnings.append("docnum.toml already exists; left unchanged")
        logger.info("Initialized %d number types under %s", len(types), workspace.state_dir)
        return ServiceResult.success(
            op,
            {
                "root": str(workspace.root),
                "state_dir": str(workspace.state_dir),
                "config_path": str(written) if written else None,
                "types": types,
                "count": len(types),
            },
            warnings,
        )
