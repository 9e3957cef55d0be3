from __future__ import annotations

import uuid

from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QColor, QFont, QPainter, QPalette, QTextFormat
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit, QWidget

from quickc.inline_run.annotations import EditorAnnotationState, InlineAnnotation
from QuickCPyside.widgets.syntax_highlighters import set_highlighter_for_file

ANNOTATION_PREFIX = " // "
ANNOTATION_LINE_JOIN = " | "


class LineNumberArea(QWidget):
    def __init__(self, editor: "CodeEditor"):
        super().__init__(editor)
        self.codeEditor = editor

    def sizeHint(self):
        return QSize(self.codeEditor.lineNumberAreaWidth(), 0)

    def paintEvent(self, event):
        self.codeEditor.lineNumberAreaPaintEvent(event)


class CodeEditor(QPlainTextEdit):
    """Plain-text C editor that can paint one trailing output annotation."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.editor_id = uuid.uuid4().hex
        self._file_path: str | None = None
        self._highlighter = None
        self._editor_background_color = QColor("#1E1E1E")
        self._annotations = EditorAnnotationState(on_changed=self.viewport().update)

        self.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.lineNumberArea = LineNumberArea(self)
        self.blockCountChanged.connect(self.updateLineNumberAreaWidth)
        self.updateRequest.connect(self.updateLineNumberArea)
        self.cursorPositionChanged.connect(self.highlightCurrentLine)
        self.updateLineNumberAreaWidth(0)
        self.highlightCurrentLine()
        set_highlighter_for_file(self, None)

    # --------- file / appearance ---------
    @property
    def file_path(self) -> str | None:
        return self._file_path

    def set_file_path(self, file_path: str | None):
        self._file_path = str(file_path) if file_path else None
        set_highlighter_for_file(self, self._file_path)

    def set_editor_font_preferences(self, *, family: str | None = None, point_size: int | None = None) -> None:
        font = QFont(self.font())
        if family:
            font.setFamily(family)
        font.setStyleHint(QFont.Monospace)
        if point_size:
            font.setPointSize(max(6, int(point_size)))
        self.setFont(font)
        self.updateLineNumberAreaWidth(0)

    def set_editor_background(self, color: str) -> None:
        candidate = QColor(str(color or ""))
        if not candidate.isValid():
            return
        self._editor_background_color = candidate
        pal = self.palette()
        pal.setColor(QPalette.Base, candidate)
        pal.setColor(QPalette.Text, QColor("#D4D4D4") if candidate.lightness() < 128 else QColor("#1E1E1E"))
        self.setPalette(pal)
        self.highlightCurrentLine()

    def cursor_line(self) -> int:
        return int(self.textCursor().blockNumber())

    def selected_text(self) -> str:
        # QTextCursor uses U+2029 between paragraphs.
        return self.textCursor().selectedText().replace("\u2029", "\n")

    # --------- line numbers ---------
    def lineNumberAreaWidth(self):
        digits = 1
        max_num = max(1, self.blockCount())
        while max_num >= 10:
            max_num //= 10
            digits += 1
        return 6 + self.fontMetrics().horizontalAdvance("9") * digits

    def updateLineNumberAreaWidth(self, _):
        self.setViewportMargins(self.lineNumberAreaWidth(), 0, 0, 0)

    def updateLineNumberArea(self, rect, dy):
        if dy:
            self.lineNumberArea.scroll(0, dy)
        else:
            self.lineNumberArea.update(0, rect.y(), self.lineNumberArea.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self.updateLineNumberAreaWidth(0)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self.lineNumberArea.setGeometry(QRect(cr.left(), cr.top(), self.lineNumberAreaWidth(), cr.height()))

    def lineNumberAreaPaintEvent(self, event):
        painter = QPainter(self.lineNumberArea)
        gutter = QColor(self._editor_background_color)
        gutter = gutter.darker(125) if gutter.lightness() < 128 else gutter.darker(108)
        painter.fillRect(event.rect(), gutter)
        number_color = gutter.lighter(155) if gutter.lightness() < 128 else gutter.darker(155)
        painter.setPen(number_color)

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        bottom = top + self.blockBoundingRect(block).height()
        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                painter.drawText(
                    0,
                    int(top),
                    self.lineNumberArea.width() - 3,
                    self.fontMetrics().height(),
                    Qt.AlignRight,
                    str(block_number + 1),
                )
            block = block.next()
            top = bottom
            bottom = top + self.blockBoundingRect(block).height()
            block_number += 1

    def highlightCurrentLine(self):
        selections: list[QTextEdit.ExtraSelection] = []
        if not self.isReadOnly():
            selection = QTextEdit.ExtraSelection()
            line_color = QColor(self._editor_background_color)
            line_color = line_color.lighter(130) if line_color.lightness() < 128 else line_color.darker(112)
            line_color.setAlpha(140)
            selection.format.setBackground(line_color)
            selection.format.setProperty(QTextFormat.FullWidthSelection, True)
            selection.cursor = self.textCursor()
            selection.cursor.clearSelection()
            selections.append(selection)
        self.setExtraSelections(selections)

    # --------- inline output annotation ---------
    def inline_annotation(self) -> InlineAnnotation | None:
        return self._annotations.current

    def set_inline_annotation(self, annotation: InlineAnnotation) -> bool:
        return self._annotations.show(annotation)

    def clear_inline_annotation(self) -> bool:
        return self._annotations.clear()

    def annotation_display_text(self) -> str:
        annotation = self._annotations.current
        if annotation is None:
            return ""
        flat = ANNOTATION_LINE_JOIN.join(part for part in annotation.text.splitlines() if part.strip())
        return f"{ANNOTATION_PREFIX}{flat}"

    def paintEvent(self, event):
        super().paintEvent(event)
        self._paint_inline_annotation()

    def _paint_inline_annotation(self) -> None:
        annotation = self._annotations.current
        if annotation is None:
            return
        block = self.document().findBlockByNumber(int(annotation.line))
        if not block.isValid() or not block.isVisible():
            return

        geometry = self.blockBoundingGeometry(block).translated(self.contentOffset())
        if geometry.bottom() < 0 or geometry.top() > self.viewport().height():
            return

        fm = self.fontMetrics()
        layout = block.layout()
        if layout is not None and layout.lineCount() > 0:
            last = layout.lineAt(layout.lineCount() - 1)
            x = geometry.left() + last.x() + last.naturalTextWidth()
            y = geometry.top() + last.y() + last.ascent()
        else:
            x = geometry.left() + fm.horizontalAdvance(block.text())
            y = geometry.top() + fm.ascent()

        max_w = max(8, int(self.viewport().width() - x - 8))
        text = fm.elidedText(self.annotation_display_text(), Qt.TextElideMode.ElideRight, max_w)

        color = QColor(annotation.color)
        if not color.isValid():
            color = QColor(self.palette().color(QPalette.PlaceholderText))

        painter = QPainter(self.viewport())
        painter.setPen(color)
        painter.drawText(int(x), int(y), text)
        painter.end()
