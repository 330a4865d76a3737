"""Deterministic source discovery and hash-based change detection."""

from __future__ import annotations

import fnmatch
import hashlib
import os
from pathlib import Path

from serial_guard.config import IndexConfig
from serial_guard.index.models import FileDelta, FileRecord

_BINARY_SNIFF_BYTES = 4096


def discover_files(
    repo_root: Path,
    config: IndexConfig,
    previous_records: dict[str, FileRecord] | None = None,
    skip_prefixes: tuple[str, ...] = (),
) -> list[FileRecord]:
    """Discover tracked source files in path order.

    Files whose size and mtime match `previous_records` reuse the stored hash
    instead of being read again.
    """
    root = repo_root.resolve()
    include_extensions = {extension.lower() for extension in config.include_extensions}
    prior = previous_records or {}
    records: list[FileRecord] = []
    for relative, full_path, size, mtime_ns in _walk(root, include_extensions, config.exclude_globs):
        if any(relative == prefix or relative.startswith(f"{prefix}/") for prefix in skip_prefixes):
            continue
        previous = prior.get(relative)
        if previous is not None and previous.size == size and previous.mtime_ns == mtime_ns:
            records.append(previous)
            continue
        try:
            if is_binary_file(full_path):
                continue
            content_hash = sha256_file(full_path)
        except OSError:
            continue
        records.append(
            FileRecord(path=relative, size=size, mtime_ns=mtime_ns, content_hash=content_hash)
        )
    records.sort(key=lambda item: item.path)
    return records


def detect_file_delta(
    previous: dict[str, FileRecord],
    current_records: list[FileRecord],
) -> FileDelta:
    """Compute deterministic added/updated/unchanged/removed sets."""
    current = record_map(current_records)
    previous_paths = set(previous.keys())
    current_paths = set(current.keys())

    updated: list[str] = []
    unchanged: list[str] = []
    for path in sorted(previous_paths & current_paths):
        if previous[path].content_hash == current[path].content_hash:
            unchanged.append(path)
            continue
        updated.append(path)

    return FileDelta(
        added=tuple(sorted(current_paths - previous_paths)),
        updated=tuple(updated),
        unchanged=tuple(unchanged),
        removed=tuple(sorted(previous_paths - current_paths)),
    )


def record_map(records: list[FileRecord]) -> dict[str, FileRecord]:
    """Map records by relative path."""
    return {record.path: record for record in records}


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def sha256_file(path: Path) -> str:
    """Compute SHA-256 hash in chunked reads."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while True:
            chunk = handle.read(1024 * 128)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def is_binary_file(path: Path) -> bool:
    """Use content sniffing to exclude binary files."""
    with path.open("rb") as handle:
        sample = handle.read(_BINARY_SNIFF_BYTES)
    if b"\x00" in sample:
        return True
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as error:
        # a multibyte character cut by the sniff window is still text
        truncated = len(sample) == _BINARY_SNIFF_BYTES and error.reason == "unexpected end of data"
        return not truncated
    return False


def _walk(
    root: Path,
    include_extensions: set[str],
    exclude_globs: tuple[str, ...],
) -> list[tuple[str, Path, int, int]]:
    found: list[tuple[str, Path, int, int]] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError:
            continue
        for entry in reversed(ordered_entries):
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if should_exclude(f"{relative}/", exclude_globs):
                    continue
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if should_exclude(relative, exclude_globs):
                continue
            if Path(relative).suffix.lower() not in include_extensions:
                continue
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            found.append((relative, full_path, stat.st_size, stat.st_mtime_ns))
    return found
