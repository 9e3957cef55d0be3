"""Controller that connects editors to the inline run pipeline."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox
from shiboken6 import isValid as _is_qobject_valid

from quickc.inline_run.annotations import InlineAnnotation
from quickc.inline_run.run_controller import InlineRunController
from QuickCPyside.widgets.code_editor import CodeEditor


class ExecutionController:
    def __init__(self, ide, run_controller: InlineRunController | None = None):
        self.ide = ide
        self.run_controller = run_controller or InlineRunController(ide)
        self._editors: dict[str, CodeEditor] = {}

        self.run_controller.annotationReady.connect(self._apply_annotation)
        self.run_controller.annotationCleared.connect(self._clear_annotation)
        self.run_controller.blockResultReady.connect(self._show_block_result)
        self.run_controller.statusMessage.connect(self._show_status)

    def __getattr__(self, name: str):
        return getattr(self.ide, name)

    # ---------- Editors ----------

    def attach_editor(self, editor: CodeEditor) -> None:
        key = editor.editor_id
        if key in self._editors:
            return
        self._editors[key] = editor
        editor.textChanged.connect(lambda ed=editor: self.on_editor_event(ed))
        editor.cursorPositionChanged.connect(lambda ed=editor: self.on_editor_event(ed))
        editor.destroyed.connect(lambda _obj=None, k=key: self.detach_editor(k))

    def detach_editor(self, editor_id: str) -> None:
        self._editors.pop(editor_id, None)
        self.run_controller.cancel_for_editor(editor_id, clear=False)

    def editor_for_id(self, editor_id: str) -> CodeEditor | None:
        editor = self._editors.get(editor_id)
        if editor is None or not _is_qobject_valid(editor):
            return None
        return editor

    def on_editor_event(self, editor: CodeEditor) -> None:
        if not _is_qobject_valid(editor):
            return
        self.run_controller.request_inline(
            editor_id=editor.editor_id,
            source_text=editor.toPlainText(),
            cursor_line=editor.cursor_line(),
            file_path=editor.file_path or "",
        )

    # ---------- Commands ----------

    def run_selected_block(self) -> bool:
        editor = self.current_editor()
        if editor is None:
            self.ide.statusBar().showMessage("No active editor.", 1500)
            return False
        return self.run_controller.request_block(
            editor_id=editor.editor_id,
            selected_text=editor.selected_text(),
            file_path=editor.file_path or "",
        )

    def update_settings(self, quickc_cfg: dict) -> None:
        self.run_controller.update_settings(quickc_cfg)

    def shutdown(self) -> None:
        self.run_controller.shutdown()

    # ---------- Results ----------

    def _apply_annotation(self, editor_id: str, annotation: object) -> None:
        editor = self.editor_for_id(editor_id)
        if editor is None or not isinstance(annotation, InlineAnnotation):
            return
        editor.set_inline_annotation(annotation)

    def _clear_annotation(self, editor_id: str) -> None:
        editor = self.editor_for_id(editor_id)
        if editor is None:
            return
        editor.clear_inline_annotation()

    def _show_block_result(self, _editor_id: str, payload: object) -> None:
        if not isinstance(payload, dict):
            return
        message = str(payload.get("message") or "")
        if payload.get("ok"):
            QMessageBox.information(self.ide, "QuickC", message)
        else:
            QMessageBox.critical(self.ide, "QuickC", message)

    def _show_status(self, message: str) -> None:
        self.ide.statusBar().showMessage(message, 2200)
