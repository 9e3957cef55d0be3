from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from quickc.inline_run.settings_schema import ERROR_COLOR


@dataclass(frozen=True, slots=True)
class InlineAnnotation:
    line: int  # 0-based
    text: str
    color: str
    is_error: bool = False

    @classmethod
    def for_result(cls, line: int, text: str, *, is_error: bool, inline_color: str) -> "InlineAnnotation":
        return cls(line=line, text=text, color=ERROR_COLOR if is_error else inline_color, is_error=is_error)


class EditorAnnotationState:
    """Holds the single visible annotation of one editor.

    ``show`` always clears the previous annotation before installing the new
    one, so an editor never carries two at once.
    """

    def __init__(self, on_changed: Callable[[], None] | None = None) -> None:
        self._current: InlineAnnotation | None = None
        self._on_changed = on_changed

    @property
    def current(self) -> InlineAnnotation | None:
        return self._current

    def has_annotation(self) -> bool:
        return self._current is not None

    def show(self, annotation: InlineAnnotation) -> bool:
        self.clear()
        if not str(annotation.text or "").strip():
            return False
        self._current = annotation
        self._notify()
        return True

    def clear(self) -> bool:
        if self._current is None:
            return False
        self._current = None
        self._notify()
        return True

    def _notify(self) -> None:
        if self._on_changed is not None:
            self._on_changed()
