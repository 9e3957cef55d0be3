"""Syntax highlighting for the C editor."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from PySide6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat

if TYPE_CHECKING:
    from QuickCPyside.widgets.code_editor import CodeEditor

C_SUFFIXES = (".c", ".h")


class CHighlighter(QSyntaxHighlighter):
    def __init__(self, parent=None):
        super().__init__(parent)
        kw = QTextCharFormat()
        kw.setForeground(QColor("#569Cff"))
        kw.setFontWeight(QFont.Bold)
        keywords = (
            "auto", "break", "case", "char", "const", "continue", "default", "do", "double",
            "else", "enum", "extern", "float", "for", "goto", "if", "inline", "int", "long",
            "register", "restrict", "return", "short", "signed", "sizeof", "static", "struct",
            "switch", "typedef", "union", "unsigned", "void", "volatile", "while",
            "_Bool", "_Complex", "_Static_assert", "_Thread_local",
        )
        self.rules = [(re.compile(rf"\b{re.escape(w)}\b"), kw) for w in keywords]

        io = QTextCharFormat()
        io.setForeground(QColor("#DCDCAA"))
        self.rules.append((re.compile(r"\b(?:printf|scanf|puts|getchar|putchar|fgets)\b"), io))

        pre = QTextCharFormat()
        pre.setForeground(QColor("#C586C0"))
        self.rules.append((re.compile(r"^\s*#.*"), pre))

        strf = QTextCharFormat()
        strf.setForeground(QColor("#CE9178"))
        self.rules += [
            (re.compile(r'"[^"\\]*(\\.[^"\\]*)*"'), strf),
            (re.compile(r"'[^'\\]*(\\.[^'\\]*)*'"), strf),
        ]

        num = QTextCharFormat()
        num.setForeground(QColor("#B5CEA8"))
        self.rules.append(
            (
                re.compile(
                    r"\b(?:"
                    r"0x[0-9a-fA-F]+"
                    r"|0[0-7]+"
                    r"|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?"
                    r")(?:u|U|l|L|ll|LL|f|F)?\b"
                ),
                num,
            )
        )

        com = QTextCharFormat()
        com.setForeground(QColor("#6A9955"))
        self.rules += [
            (re.compile(r"//[^\n]*"), com),
            (re.compile(r"/\*.*?\*/"), com),
        ]

    def highlightBlock(self, text):
        for pat, fmt in self.rules:
            for m in pat.finditer(text):
                self.setFormat(m.start(), m.end() - m.start(), fmt)


def is_c_path(file_path: str | None) -> bool:
    return str(file_path or "").lower().endswith(C_SUFFIXES)


def set_highlighter_for_file(editor: "CodeEditor", file_path: str | None) -> None:
    current = getattr(editor, "_highlighter", None)
    # Unsaved buffers are treated as C.
    wants_c = not file_path or is_c_path(file_path)
    if wants_c and isinstance(current, CHighlighter):
        return
    if current is not None:
        current.setDocument(None)
        editor._highlighter = None
    if wants_c:
        editor._highlighter = CHighlighter(editor.document())
