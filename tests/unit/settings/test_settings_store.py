from __future__ import annotations

from serial_guard.config import NotificationSettings
from serial_guard.settings import SettingsStore


def test_defaults_are_disabled_with_ten_second_cooldown() -> None:
    store = SettingsStore()

    assert store.snapshot().enabled is False
    assert store.form_values() == (False, "10000")


def test_cooldown_updates_are_clamped() -> None:
    store = SettingsStore()

    assert store.set_cooldown_ms(200)
    assert store.snapshot().cooldown_ms == 1_000
    assert store.set_cooldown_ms("30000")
    assert store.snapshot().cooldown_ms == 30_000


def test_malformed_cooldown_keeps_previous_value() -> None:
    store = SettingsStore(NotificationSettings(cooldown_ms=4_000))

    assert not store.set_cooldown_ms("ten seconds")
    assert not store.set_cooldown_ms(None)
    assert store.snapshot().cooldown_ms == 4_000


def test_form_round_trip_and_modified_detection() -> None:
    store = SettingsStore()

    assert not store.is_modified(False, "10000")
    assert store.is_modified(True, "10000")
    assert store.is_modified(False, "5000")
    assert store.is_modified(False, "abc")

    assert not store.apply_form(True, "abc")
    assert store.snapshot().enabled is True
    assert store.snapshot().cooldown_ms == 10_000

    assert store.apply_form(True, "2500")
    assert store.form_values() == (True, "2500")


def test_snapshots_are_immutable_values() -> None:
    store = SettingsStore()
    before = store.snapshot()

    store.set_enabled(True)

    assert before.enabled is False
    assert store.snapshot().enabled is True
