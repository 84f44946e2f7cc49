from __future__ import annotations

import pytest


class RecordingLogger:
    """Collects log calls as (level, event, fields) tuples."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, fields: dict) -> None:
        self.records.append((level, event, fields))

    def debug(self, event: str, **fields) -> None:
        self._record("debug", event, fields)

    def info(self, event: str, **fields) -> None:
        self._record("info", event, fields)

    def warning(self, event: str, **fields) -> None:
        self._record("warning", event, fields)

    def error(self, event: str, **fields) -> None:
        self._record("error", event, fields)

    def events(self, level: str) -> list[str]:
        return [event for lvl, event, _ in self.records if lvl == level]

    def find(self, level: str, text: str) -> list[dict]:
        return [
            fields
            for lvl, event, fields in self.records
            if lvl == level and text.lower() in event.lower()
        ]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
