"""Shared type aliases for macalias modules."""

from datetime import datetime
from pathlib import Path

Timestamp = int | datetime | None
FourCC = bytes | str
Source = str | Path | bytes
