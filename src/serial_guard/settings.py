"""Thread-safe holder for the live notification settings."""

from __future__ import annotations

import threading
from dataclasses import replace

from serial_guard.config import NotificationSettings, parse_cooldown


class SettingsStore:
    """Mutable notification settings shared by the pipeline and its callers.

    Readers always get an immutable snapshot. Malformed cooldown input never
    raises; the previous valid value stays in place.
    """

    def __init__(self, initial: NotificationSettings | None = None) -> None:
        self._lock = threading.Lock()
        self._settings = initial or NotificationSettings()

    def snapshot(self) -> NotificationSettings:
        """Return the current settings."""
        with self._lock:
            return self._settings

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._settings = replace(self._settings, enabled=bool(enabled))

    def set_cooldown_ms(self, value: object) -> bool:
        """Store a clamped cooldown. Returns False and keeps the old value when malformed."""
        parsed = parse_cooldown(value)
        if parsed is None:
            return False
        with self._lock:
            self._settings = replace(self._settings, cooldown_ms=parsed)
        return True

    def form_values(self) -> tuple[bool, str]:
        """Return (enabled, cooldown text) as an editing form would show them."""
        current = self.snapshot()
        return current.enabled, str(current.cooldown_ms)

    def is_modified(self, enabled: bool, cooldown_text: str) -> bool:
        """Return True when form input differs from the stored settings."""
        current = self.snapshot()
        if enabled != current.enabled:
            return True
        try:
            return int(cooldown_text.strip()) != current.cooldown_ms
        except ValueError:
            return True

    def apply_form(self, enabled: bool, cooldown_text: str) -> bool:
        """Apply form input. Returns False when the cooldown text was ignored."""
        self.set_enabled(enabled)
        return self.set_cooldown_ms(cooldown_text)
