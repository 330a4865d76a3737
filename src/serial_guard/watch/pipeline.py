"""Asynchronous edit pipeline: pre-filter, debounce, analyze, throttle, notify."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

from serial_guard.logging import JsonlAuditLogger, audit_event
from serial_guard.model import ModelClass, StructuralModel
from serial_guard.qualification import PreFilter, QualificationCache, QualificationResult
from serial_guard.settings import SettingsStore
from serial_guard.watch.changes import ChangeEvent, ChangeKind
from serial_guard.watch.debounce import Debouncer
from serial_guard.watch.notifications import NotificationSink, edit_warning
from serial_guard.watch.scheduler import Clock, Scheduler
from serial_guard.watch.throttle import NotificationThrottle


@dataclass(slots=True)
class PipelineStats:
    """Running counters, mostly for status output and tests."""

    events_seen: int = 0
    prefiltered_out: int = 0
    scheduled_edits: int = 0
    checks_run: int = 0
    superseded: int = 0
    qualifying_checks: int = 0
    notified: int = 0
    suppressed: int = 0
    errors: int = 0


class EditPipeline:
    """Best-effort warning pipeline fed by change-event batches.

    Does nothing while settings are missing or notifications are disabled.
    Failures inside deferred checks go to the audit log only.
    """

    def __init__(
        self,
        model: StructuralModel,
        cache: QualificationCache,
        settings: SettingsStore | None,
        scheduler: Scheduler,
        clock: Clock,
        sink: NotificationSink,
        *,
        scope: str,
        marker_label: str,
        audit: JsonlAuditLogger | None = None,
    ) -> None:
        self._model = model
        self._cache = cache
        self._settings = settings
        self._clock = clock
        self._sink = sink
        self._scope = scope
        self._marker_label = marker_label
        self._audit = audit
        self._stats_lock = threading.Lock()
        self.stats = PipelineStats()

        initial = settings.snapshot() if settings is not None else None
        self._prefilter = PreFilter(cache.engine.markers)
        self._throttle = NotificationThrottle(
            cooldown_ms=self._current_cooldown,
            max_entries=(initial.max_tracked_files or None) if initial is not None else None,
        )
        self._debouncer = Debouncer(
            scheduler=scheduler,
            clock=clock,
            check=self._check,
            quiet_period_ms=initial.quiet_period_ms if initial is not None else 1_000,
            reschedule_on_early_fire=(
                initial.reschedule_on_early_fire if initial is not None else True
            ),
            on_error=self._on_error,
            on_superseded=self._on_superseded,
        )

    @property
    def throttle(self) -> NotificationThrottle:
        return self._throttle

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    @property
    def prefilter(self) -> PreFilter:
        return self._prefilter

    def enabled(self) -> bool:
        """Return True when settings exist and notifications are switched on."""
        if self._settings is None:
            return False
        return self._settings.snapshot().enabled

    def handle_events(self, events: Iterable[ChangeEvent]) -> int:
        """Feed one batch of change events. Returns how many edits were scheduled."""
        if not self.enabled():
            return 0
        scheduled = 0
        for event in events:
            self._bump("events_seen")
            if event.kind is not ChangeKind.CONTENT_CHANGED:
                continue
            if not self._model.is_source_path(event.path):
                continue
            text = self._model.text_of(event.path)
            if text is None or not (
                self._prefilter.might_qualify(text) or self._extends_qualifying(event.path)
            ):
                self._bump("prefiltered_out")
                continue
            self._debouncer.on_edit(event.path)
            self._bump("scheduled_edits")
            scheduled += 1
        return scheduled

    def _check(self, path: str) -> None:
        if not self.enabled():
            return
        self._bump("checks_run")
        now = self._clock()
        if not self._throttle.should_notify(path, now):
            self._suppressed(path, reason="cooldown_before_analysis")
            return

        hit: tuple[ModelClass, QualificationResult] | None = None
        with self._model.read_section():
            classes = self._model.classes_in(path)
            if classes is None:
                return
            for model_class in classes:
                result = self._cache.get(model_class)
                if result.qualifies:
                    hit = (model_class, result)
                    break
        if hit is None:
            return

        self._bump("qualifying_checks")
        model_class, result = hit
        if not self._throttle.try_acquire(path, now):
            self._suppressed(path, reason="cooldown")
            return
        file_name = PurePosixPath(path).name
        self._sink.publish(
            edit_warning(file_name, model_class.name, self._marker_label, self._scope)
        )
        self._bump("notified")
        self._log(
            "pipeline.notified",
            path,
            class_name=model_class.qualified_name,
            evidence=result.evidence.value,
            source=result.source,
        )

    def _extends_qualifying(self, path: str) -> bool:
        """Return True when a class in the file directly extends a qualifying class."""
        with self._model.read_section():
            for model_class in self._model.classes_in(path) or ():
                supertype = model_class.supertype()
                if supertype is not None and self._cache.get(supertype).qualifies:
                    return True
        return False

    def _current_cooldown(self) -> int:
        if self._settings is None:
            return 0
        return self._settings.snapshot().cooldown_ms

    def _suppressed(self, path: str, reason: str) -> None:
        self._bump("suppressed")
        self._log("pipeline.suppressed", path, reason=reason)

    def _on_superseded(self, path: str) -> None:
        self._bump("superseded")
        self._log("pipeline.superseded", path)

    def _on_error(self, path: str, error: Exception) -> None:
        self._bump("errors")
        self._log(
            "pipeline.error",
            path,
            ok=False,
            error_code=type(error).__name__,
            message=str(error),
        )

    def _log(
        self,
        event: str,
        path: str,
        ok: bool = True,
        error_code: str | None = None,
        **metadata: object,
    ) -> None:
        if self._audit is None:
            return
        try:
            self._audit.append(audit_event(event, path, ok=ok, error_code=error_code, **metadata))
        except OSError:
            # audit output is best-effort on this path
            return

    def _bump(self, counter: str) -> None:
        with self._stats_lock:
            setattr(self.stats, counter, getattr(self.stats, counter) + 1)
