"""PySide widgets used by the QuickC editor."""

from .code_editor import CodeEditor

__all__ = ["CodeEditor"]
