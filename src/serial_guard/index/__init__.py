"""Source discovery and change detection."""

from .discovery import detect_file_delta, discover_files, record_map, should_exclude
from .models import FileDelta, FileRecord

__all__ = [
    "FileDelta",
    "FileRecord",
    "detect_file_delta",
    "discover_files",
    "record_map",
    "should_exclude",
]
