"""Wires the model, qualification core, pipeline and actions for one repository."""

from __future__ import annotations

import sys
from dataclasses import asdict
from pathlib import Path

from serial_guard.actions import CheckAction, ClassReport, OnDemandChecker
from serial_guard.config import CliOverrides, GuardConfig, load_effective_config
from serial_guard.inspection import ClassInspection, InspectionWarning
from serial_guard.logging import JsonlAuditLogger
from serial_guard.model import StructuralModel
from serial_guard.qualification import QualificationCache, QualificationEngine
from serial_guard.settings import SettingsStore
from serial_guard.watch import (
    ChangeEvent,
    EditPipeline,
    FanOutNotificationSink,
    JsonlNotificationSink,
    NotificationSink,
    PollingChangeSource,
    Scheduler,
    StreamNotificationSink,
    ThreadingScheduler,
)


class SerialGuard:
    """Everything needed to watch and check one repository."""

    def __init__(
        self,
        config: GuardConfig,
        *,
        scheduler: Scheduler | None = None,
        sink: NotificationSink | None = None,
    ) -> None:
        self._config = config
        self._repo_root = config.repo_root
        self._scope = str(config.repo_root)
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._audit = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        self._sink: NotificationSink = sink or FanOutNotificationSink(
            [
                StreamNotificationSink(sys.stderr),
                JsonlNotificationSink(config.data_dir / "notifications.jsonl"),
            ]
        )
        self._settings = SettingsStore(config.notifications)

        self._model = StructuralModel(config.index.include_extensions)
        self._engine = QualificationEngine(
            markers=config.qualification.markers,
            max_depth=config.qualification.max_supertype_depth,
            root_types=config.qualification.root_types,
        )
        self._cache = QualificationCache(self._engine, revision=lambda: self._model.revision)
        self._source = PollingChangeSource(
            repo_root=self._repo_root,
            index_config=config.index,
            model=self._model,
            skip_prefixes=_data_dir_prefixes(config),
        )
        self._pipeline = EditPipeline(
            model=self._model,
            cache=self._cache,
            settings=self._settings,
            scheduler=self._scheduler,
            clock=self._scheduler.now,
            sink=self._sink,
            scope=self._scope,
            marker_label=config.marker_label,
            audit=self._audit,
        )
        self._action = CheckAction(
            OnDemandChecker(self._model, self._engine),
            self._sink,
            scope=self._scope,
            marker_label=config.marker_label,
            audit=self._audit,
        )
        self._inspection = ClassInspection(self._cache, config.marker_label)

    @property
    def config(self) -> GuardConfig:
        return self._config

    @property
    def model(self) -> StructuralModel:
        return self._model

    @property
    def settings(self) -> SettingsStore:
        return self._settings

    @property
    def pipeline(self) -> EditPipeline:
        return self._pipeline

    @property
    def audit(self) -> JsonlAuditLogger:
        return self._audit

    def prime(self) -> int:
        """Load the repository into the model. Returns the number of tracked files."""
        return self._source.prime()

    def poll(self) -> list[ChangeEvent]:
        """Scan for changes once and feed them to the edit pipeline."""
        events = self._source.poll()
        self._pipeline.handle_events(events)
        return events

    def check(self, path: str) -> list[ClassReport] | None:
        """Run the on-demand check for one file."""
        return self._action.perform(self.relative_path(path))

    def inspect(self, paths: list[str] | None = None) -> list[InspectionWarning]:
        """Inspect the given files, or every tracked file."""
        if not paths:
            return self._inspection.inspect_all(self._model)
        warnings: list[InspectionWarning] = []
        for path in paths:
            warnings.extend(self._inspection.inspect_file(self._model, self.relative_path(path)))
        return warnings

    def relative_path(self, candidate: str) -> str:
        """Normalize a user path to the repository-relative form the model uses.

        Paths outside the repository are returned normalized but unchanged in
        meaning, so lookups simply find nothing.
        """
        normalized = candidate.replace("\\", "/").strip()
        path = Path(normalized)
        if path.is_absolute():
            resolved = path.resolve(strict=False)
            if resolved.is_relative_to(self._repo_root):
                return resolved.relative_to(self._repo_root).as_posix()
            return normalized
        parts = [part for part in normalized.split("/") if part not in ("", ".")]
        return "/".join(parts)

    def status(self) -> dict[str, object]:
        """Return a serializable snapshot of configuration and runtime counters."""
        settings = self._settings.snapshot()
        return {
            "effective_config": self._config.to_public_dict(),
            "notifications_enabled": settings.enabled,
            "cooldown_ms": settings.cooldown_ms,
            "tracked_file_count": len(self._model.paths()),
            "class_count": len(self._model.all_classes()),
            "structural_revision": self._model.revision,
            "cache": {"hits": self._cache.hits, "misses": self._cache.misses},
            "pipeline": asdict(self._pipeline.stats),
            "pending_paths": list(self._pipeline.debouncer.pending_paths()),
            "throttled_paths": len(self._pipeline.throttle),
        }

    def close(self) -> None:
        """Cancel outstanding deferred checks."""
        shutdown = getattr(self._scheduler, "shutdown", None)
        if callable(shutdown):
            shutdown()


def create_guard(
    repo_root: str,
    cli_overrides: CliOverrides | None = None,
    *,
    scheduler: Scheduler | None = None,
    sink: NotificationSink | None = None,
) -> SerialGuard:
    """Load effective config for a repository and build its guard."""
    config = load_effective_config(Path(repo_root), cli_overrides)
    return SerialGuard(config, scheduler=scheduler, sink=sink)


def _data_dir_prefixes(config: GuardConfig) -> tuple[str, ...]:
    if not config.data_dir.is_relative_to(config.repo_root):
        return ()
    return (config.data_dir.relative_to(config.repo_root).as_posix(),)
