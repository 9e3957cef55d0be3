"""Decide whether a document should be compiled and which line gets the output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

DEFAULT_TRIGGER_MARKERS = ("printf", "scanf")


@dataclass(frozen=True, slots=True)
class TriggerMatch:
    line: int  # 0-based
    marker: str


def source_lines(source_text: str) -> list[str]:
    # Newlines only, matching QTextDocument blocks.
    return str(source_text or "").replace("\r\n", "\n").split("\n")


def line_marker(line_text: str, markers: Iterable[str] = DEFAULT_TRIGGER_MARKERS) -> str | None:
    text = str(line_text or "").strip()
    if not text:
        return None
    for marker in markers:
        if marker and marker in text:
            return marker
    return None


def detect_in_line(
    source_text: str,
    cursor_line: int,
    markers: Iterable[str] = DEFAULT_TRIGGER_MARKERS,
) -> TriggerMatch | None:
    """Match only the cursor line; the cursor line is the annotation target."""
    lines = source_lines(source_text)
    if cursor_line < 0 or cursor_line >= len(lines):
        return None
    marker = line_marker(lines[cursor_line], markers)
    if marker is None:
        return None
    return TriggerMatch(line=cursor_line, marker=marker)


def detect_in_document(
    source_text: str,
    markers: Iterable[str] = DEFAULT_TRIGGER_MARKERS,
) -> TriggerMatch | None:
    """Return the first line anywhere in the document that contains a marker."""
    marker_list = tuple(markers)
    for idx, line in enumerate(source_lines(source_text)):
        marker = line_marker(line, marker_list)
        if marker is not None:
            return TriggerMatch(line=idx, marker=marker)
    return None


def detect_trigger(
    source_text: str,
    cursor_line: int,
    *,
    policy: str = "cursor_line",
    markers: Iterable[str] = DEFAULT_TRIGGER_MARKERS,
) -> TriggerMatch | None:
    if policy == "document":
        return detect_in_document(source_text, markers)
    if policy == "cursor_line":
        return detect_in_line(source_text, cursor_line, markers)
    raise ValueError(f"Unknown detection policy: {policy}")
