from __future__ import annotations

from pathlib import Path

import pytest

from serial_guard.app import create_guard


@pytest.mark.parametrize(
    ("lines", "fragment"),
    [
        (["[notifications]", 'enabled = "yes"'], "notifications.enabled"),
        (["[notifications]", "quiet_period_ms = 0"], "notifications.quiet_period_ms"),
        (["[qualification]", "max_supertype_depth = 0"], "qualification.max_supertype_depth"),
        (["[qualification]", "max_supertype_depth = 5000"], "qualification.max_supertype_depth"),
        (["[qualification]", 'markers = [""]'], "qualification.markers"),
        (["[qualification]", "markers = [1, 2]"], "qualification.markers"),
        (["[index]", 'exclude_globs = "build"'], "index.exclude_globs"),
        (["notifications = 3"], "notifications"),
    ],
)
def test_invalid_config_raises_value_error(
    tmp_path: Path, lines: list[str], fragment: str
) -> None:
    (tmp_path / "serial_guard.toml").write_text("\n".join(lines), encoding="utf-8")

    with pytest.raises(ValueError, match=fragment):
        create_guard(repo_root=str(tmp_path))
