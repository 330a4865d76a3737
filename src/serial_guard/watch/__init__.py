"""Change detection, debouncing, throttling and notification delivery."""

from .changes import ChangeEvent, ChangeKind, PollingChangeSource
from .debounce import DEFAULT_QUIET_PERIOD_MS, Debouncer, PendingFile
from .notifications import (
    CollectingNotificationSink,
    FanOutNotificationSink,
    JsonlNotificationSink,
    Notification,
    NotificationSink,
    Severity,
    StreamNotificationSink,
)
from .pipeline import EditPipeline, PipelineStats
from .scheduler import ManualScheduler, ScheduledTask, Scheduler, ThreadingScheduler, monotonic_ms
from .throttle import NotificationThrottle

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "CollectingNotificationSink",
    "DEFAULT_QUIET_PERIOD_MS",
    "Debouncer",
    "EditPipeline",
    "FanOutNotificationSink",
    "JsonlNotificationSink",
    "ManualScheduler",
    "Notification",
    "NotificationSink",
    "NotificationThrottle",
    "PendingFile",
    "PipelineStats",
    "PollingChangeSource",
    "ScheduledTask",
    "Scheduler",
    "Severity",
    "StreamNotificationSink",
    "ThreadingScheduler",
    "monotonic_ms",
]
