"""Structured logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, audit_event, utc_timestamp

__all__ = ["AuditEvent", "JsonlAuditLogger", "audit_event", "utc_timestamp"]
