"""Synchronous on-demand checks triggered by an explicit user action."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from serial_guard.logging import JsonlAuditLogger, audit_event
from serial_guard.model import StructuralModel
from serial_guard.qualification import QualificationEngine
from serial_guard.watch.notifications import (
    Notification,
    NotificationSink,
    check_failed,
    check_summary,
    not_a_source_file,
)


class NotASourceFileError(Exception):
    """Raised when a path is not a parsed source file in the model."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not a parseable source file: {path}")
        self.path = path


@dataclass(slots=True, frozen=True)
class ClassReport:
    """Qualification outcome for one class in an on-demand run."""

    class_name: str
    qualified_name: str
    qualifies: bool
    evidence: str
    source: str | None
    line: int | None = None


class OnDemandChecker:
    """Runs the engine directly over every class of a file.

    Bypasses the debouncer, the throttle and the cache, and ignores whether
    notifications are enabled.
    """

    def __init__(self, model: StructuralModel, engine: QualificationEngine) -> None:
        self._model = model
        self._engine = engine

    def run(self, path: str) -> list[ClassReport]:
        with self._model.read_section():
            classes = self._model.classes_in(path)
            if classes is None:
                raise NotASourceFileError(path)
            reports: list[ClassReport] = []
            for model_class in classes:
                result = self._engine.evaluate(model_class)
                token = model_class.name_token
                reports.append(
                    ClassReport(
                        class_name=model_class.name,
                        qualified_name=model_class.qualified_name,
                        qualifies=result.qualifies,
                        evidence=result.evidence.value,
                        source=result.source,
                        line=token.line if token is not None else None,
                    )
                )
        return reports


class CheckAction:
    """User-facing boundary around `OnDemandChecker`; never raises."""

    def __init__(
        self,
        checker: OnDemandChecker,
        sink: NotificationSink,
        *,
        scope: str,
        marker_label: str,
        audit: JsonlAuditLogger | None = None,
    ) -> None:
        self._checker = checker
        self._sink = sink
        self._scope = scope
        self._marker_label = marker_label
        self._audit = audit

    def perform(self, path: str) -> list[ClassReport] | None:
        """Check a file and publish the summary. Returns None when the check could not run."""
        file_name = PurePosixPath(path).name or path
        try:
            reports = self._checker.run(path)
        except NotASourceFileError:
            self._log("action.check", path, ok=False, error_code="NOT_A_SOURCE_FILE")
            self._publish(path, not_a_source_file(file_name, self._marker_label, self._scope))
            return None
        except Exception as error:
            self._log(
                "action.failed",
                path,
                ok=False,
                error_code=type(error).__name__,
                message=str(error),
            )
            self._publish(path, check_failed(file_name, error, self._scope))
            return None

        qualifying = [report.class_name for report in reports if report.qualifies]
        self._log("action.check", path, classes=len(reports), qualifying=len(qualifying))
        self._publish(path, check_summary(file_name, qualifying, self._marker_label, self._scope))
        return reports

    def _publish(self, path: str, notification: Notification) -> None:
        try:
            self._sink.publish(notification)
        except Exception as error:
            self._log(
                "action.failed",
                path,
                ok=False,
                error_code=type(error).__name__,
                message=str(error),
                stage="publish",
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
            return
