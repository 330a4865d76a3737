"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from serial_guard.qualification import (
    DEFAULT_MARKERS,
    DEFAULT_MAX_SUPERTYPE_DEPTH,
    DEFAULT_ROOT_TYPES,
    simple_name,
)

CONFIG_FILE_NAME = "serial_guard.toml"
DEFAULT_DATA_DIR_NAME = ".serial_guard"

DEFAULT_COOLDOWN_MS = 10_000
MIN_COOLDOWN_MS = 1_000
DEFAULT_QUIET_PERIOD_MS = 1_000
MAX_SUPERTYPE_DEPTH_CAP = 1_000

DEFAULT_INCLUDE_EXTENSIONS = (".java",)
DEFAULT_EXCLUDE_GLOBS = (
    "**/.git/**",
    "**/.gradle/**",
    "**/.idea/**",
    "**/build/**",
    "**/out/**",
    "**/target/**",
)


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Which files the change source tracks."""

    include_extensions: tuple[str, ...]
    exclude_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class NotificationSettings:
    """Settings read by the asynchronous edit pipeline.

    `reschedule_on_early_fire` defaults to re-arming an early timer instead of
    dropping the cycle.
    """

    enabled: bool = False
    cooldown_ms: int = DEFAULT_COOLDOWN_MS
    quiet_period_ms: int = DEFAULT_QUIET_PERIOD_MS
    max_tracked_files: int = 0
    reschedule_on_early_fire: bool = True


@dataclass(slots=True, frozen=True)
class QualificationConfig:
    """Marker names and supertype walk limits."""

    markers: tuple[str, ...]
    max_supertype_depth: int
    root_types: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class GuardConfig:
    """Fully merged configuration."""

    repo_root: Path
    data_dir: Path
    notifications: NotificationSettings
    qualification: QualificationConfig
    index: IndexConfig
    warnings: tuple[str, ...] = ()

    @property
    def marker_label(self) -> str:
        """Return the display form of the primary marker, e.g. '@Autoserializable'."""
        return f"@{simple_name(self.qualification.markers[0])}"

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for status output."""
        return {
            "repo_root": str(self.repo_root),
            "data_dir": str(self.data_dir),
            "notifications": {
                "enabled": self.notifications.enabled,
                "cooldown_ms": self.notifications.cooldown_ms,
                "quiet_period_ms": self.notifications.quiet_period_ms,
                "max_tracked_files": self.notifications.max_tracked_files,
                "reschedule_on_early_fire": self.notifications.reschedule_on_early_fire,
            },
            "qualification": {
                "markers": list(self.qualification.markers),
                "max_supertype_depth": self.qualification.max_supertype_depth,
                "root_types": list(self.qualification.root_types),
            },
            "index": {
                "include_extensions": list(self.index.include_extensions),
                "exclude_globs": list(self.index.exclude_globs),
            },
            "warnings": list(self.warnings),
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    notifications_enabled: bool | None = None
    cooldown_ms: int | None = None
    quiet_period_ms: int | None = None


def clamp_cooldown(value: int) -> int:
    """Clamp a cooldown to the supported minimum."""
    return max(MIN_COOLDOWN_MS, value)


def parse_cooldown(value: object) -> int | None:
    """Parse an int or numeric text cooldown; None when the value is malformed."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return clamp_cooldown(value)
    if isinstance(value, str):
        try:
            return clamp_cooldown(int(value.strip()))
        except ValueError:
            return None
    return None


def default_config(repo_root: Path) -> GuardConfig:
    """Build default config for a given repository root."""
    resolved_root = repo_root.resolve()
    return GuardConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIR_NAME,
        notifications=NotificationSettings(),
        qualification=QualificationConfig(
            markers=DEFAULT_MARKERS,
            max_supertype_depth=DEFAULT_MAX_SUPERTYPE_DEPTH,
            root_types=DEFAULT_ROOT_TYPES,
        ),
        index=IndexConfig(
            include_extensions=DEFAULT_INCLUDE_EXTENSIONS,
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
        ),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional serial_guard.toml from repo root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_int(
    value: object,
    name: str,
    default: int,
    minimum: int,
    cap: int | None = None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValueError(f"Config field '{name}' must be an integer >= {minimum}.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def merge_config(
    base: GuardConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> GuardConfig:
    """Merge defaults, repo config, then CLI/startup overrides."""
    notifications_payload = _get_table(repo_payload, "notifications")
    qualification_payload = _get_table(repo_payload, "qualification")
    index_payload = _get_table(repo_payload, "index")
    warnings = list(base.warnings)

    cooldown_ms = base.notifications.cooldown_ms
    if "cooldown_ms" in notifications_payload:
        parsed = parse_cooldown(notifications_payload["cooldown_ms"])
        if parsed is None:
            warnings.append(
                "Config field 'notifications.cooldown_ms' is not numeric; "
                f"keeping {cooldown_ms}."
            )
        else:
            cooldown_ms = parsed

    notifications = NotificationSettings(
        enabled=_optional_bool(
            notifications_payload.get("enabled"),
            "notifications.enabled",
            base.notifications.enabled,
        ),
        cooldown_ms=cooldown_ms,
        quiet_period_ms=_optional_int(
            notifications_payload.get("quiet_period_ms"),
            "notifications.quiet_period_ms",
            base.notifications.quiet_period_ms,
            minimum=1,
        ),
        max_tracked_files=_optional_int(
            notifications_payload.get("max_tracked_files"),
            "notifications.max_tracked_files",
            base.notifications.max_tracked_files,
            minimum=0,
        ),
        reschedule_on_early_fire=_optional_bool(
            notifications_payload.get("reschedule_on_early_fire"),
            "notifications.reschedule_on_early_fire",
            base.notifications.reschedule_on_early_fire,
        ),
    )

    markers = base.qualification.markers
    if "markers" in qualification_payload:
        markers = _tuple_of_strings(qualification_payload["markers"], "qualification", "markers")
        if not any(marker.strip() for marker in markers):
            raise ValueError("Config field 'qualification.markers' must not be empty.")
    root_types = base.qualification.root_types
    if "root_types" in qualification_payload:
        root_types = _tuple_of_strings(
            qualification_payload["root_types"], "qualification", "root_types"
        )
    qualification = QualificationConfig(
        markers=markers,
        max_supertype_depth=_optional_int(
            qualification_payload.get("max_supertype_depth"),
            "qualification.max_supertype_depth",
            base.qualification.max_supertype_depth,
            minimum=1,
            cap=MAX_SUPERTYPE_DEPTH_CAP,
        ),
        root_types=root_types,
    )

    include_extensions = base.index.include_extensions
    if "include_extensions" in index_payload:
        include_extensions = tuple(
            extension.lower()
            for extension in _tuple_of_strings(
                index_payload["include_extensions"], "index", "include_extensions"
            )
        )
    exclude_globs = base.index.exclude_globs
    if "exclude_globs" in index_payload:
        exclude_globs = _tuple_of_strings(index_payload["exclude_globs"], "index", "exclude_globs")

    merged = GuardConfig(
        repo_root=base.repo_root,
        data_dir=base.data_dir,
        notifications=notifications,
        qualification=qualification,
        index=IndexConfig(include_extensions=include_extensions, exclude_globs=exclude_globs),
        warnings=tuple(warnings),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: GuardConfig, overrides: CliOverrides) -> GuardConfig:
    """Apply startup overrides at highest precedence."""
    notifications = config.notifications
    if overrides.notifications_enabled is not None:
        notifications = replace(notifications, enabled=overrides.notifications_enabled)
    if overrides.cooldown_ms is not None:
        notifications = replace(notifications, cooldown_ms=clamp_cooldown(overrides.cooldown_ms))
    if overrides.quiet_period_ms is not None:
        notifications = replace(
            notifications,
            quiet_period_ms=_optional_int(
                overrides.quiet_period_ms,
                "overrides.quiet_period_ms",
                notifications.quiet_period_ms,
                minimum=1,
            ),
        )
    data_dir = overrides.data_dir or config.data_dir
    return replace(config, data_dir=data_dir.resolve(), notifications=notifications)


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> GuardConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
