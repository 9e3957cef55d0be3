from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QFileDialog, QMainWindow, QMessageBox

from quickc.services.file_io import read_source, save_source
from quickc.settings_store import JsonSettingsStore, SettingsStoreError
from quickc.ui.controllers import ActionRegistry, ExecutionController
from QuickCPyside.widgets.code_editor import CodeEditor

C_FILE_FILTER = "C sources (*.c *.h);;All files (*)"
NEW_FILE_TEMPLATE = '#include <stdio.h>\n\nint main(void) {\n    printf("hi");\n    return 0;\n}\n'


class QuickCWindow(QMainWindow):
    APP_NAME = "QuickC"

    def __init__(self, settings_store: JsonSettingsStore | None = None, parent=None):
        super().__init__(parent)
        self.settings_store = settings_store or JsonSettingsStore()
        if settings_store is None:
            self.settings_store.load()

        self.editor = CodeEditor(self)
        self.setCentralWidget(self.editor)
        self._apply_editor_settings()

        self.execution_controller = ExecutionController(self)
        self.execution_controller.update_settings(self.settings_store.get("quickc", default={}))
        self.execution_controller.attach_editor(self.editor)

        ActionRegistry.create_actions(self)
        self.resize(
            int(self.settings_store.get("window.width", default=960) or 960),
            int(self.settings_store.get("window.height", default=720) or 720),
        )
        self._refresh_title()
        self.editor.document().modificationChanged.connect(lambda _m: self._refresh_title())

    def current_editor(self) -> CodeEditor | None:
        return self.editor

    def _apply_editor_settings(self) -> None:
        self.editor.set_editor_font_preferences(
            family=str(self.settings_store.get("editor.font_family", default="") or ""),
            point_size=int(self.settings_store.get("editor.font_size", default=11) or 11),
        )
        self.editor.set_editor_background(str(self.settings_store.get("editor.background_color", default="") or ""))

    def _refresh_title(self) -> None:
        path = self.editor.file_path
        name = Path(path).name if path else "untitled.c"
        dirty = "*" if self.editor.document().isModified() else ""
        self.setWindowTitle(f"{name}{dirty} - {self.APP_NAME}")

    # ---------- File commands ----------

    def new_file(self) -> None:
        if not self._confirm_discard_changes():
            return
        self.editor.clear_inline_annotation()
        self.editor.set_file_path(None)
        self.editor.setPlainText(NEW_FILE_TEMPLATE)
        self.editor.document().setModified(False)
        self._refresh_title()

    def open_file_dialog(self) -> None:
        if not self._confirm_discard_changes():
            return
        start_dir = os.path.dirname(self.editor.file_path or "") or str(Path.home())
        path, _ = QFileDialog.getOpenFileName(self, "Open C File", start_dir, C_FILE_FILTER)
        if path:
            self.open_file(path)

    def open_file(self, path: str) -> bool:
        try:
            text = read_source(path)
        except OSError as exc:
            QMessageBox.warning(self, "Open File", f"Could not open file:\n{exc}")
            return False
        self.editor.clear_inline_annotation()
        self.editor.set_file_path(os.path.abspath(path))
        self.editor.setPlainText(text)
        self.editor.document().setModified(False)
        self.settings_store.set("window.last_file", os.path.abspath(path))
        self._refresh_title()
        return True

    def save_current_editor(self) -> bool:
        if not self.editor.file_path:
            return self.save_current_editor_as()
        return self._write_editor(self.editor.file_path)

    def save_current_editor_as(self) -> bool:
        start_dir = os.path.dirname(self.editor.file_path or "") or str(Path.home())
        path, _ = QFileDialog.getSaveFileName(self, "Save File As", start_dir, C_FILE_FILTER)
        if not path:
            return False
        if not self._write_editor(path):
            return False
        self.editor.set_file_path(os.path.abspath(path))
        self.settings_store.set("window.last_file", os.path.abspath(path))
        self._refresh_title()
        return True

    def _write_editor(self, path: str) -> bool:
        try:
            save_source(path, self.editor.toPlainText())
        except OSError as exc:
            QMessageBox.warning(self, "Save File", f"Could not save file:\n{exc}")
            return False
        self.editor.document().setModified(False)
        self.statusBar().showMessage(f"Saved {os.path.basename(path)}", 1500)
        return True

    def _confirm_discard_changes(self) -> bool:
        if not self.editor.document().isModified():
            return True
        choice = QMessageBox.question(
            self,
            self.APP_NAME,
            "Save changes to the current file?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
            QMessageBox.Save,
        )
        if choice == QMessageBox.Cancel:
            return False
        if choice == QMessageBox.Save:
            return self.save_current_editor()
        return True

    def closeEvent(self, event: QCloseEvent):
        if not self._confirm_discard_changes():
            event.ignore()
            return
        self.execution_controller.shutdown()
        self.settings_store.set("window.width", int(self.width()))
        self.settings_store.set("window.height", int(self.height()))
        if self.settings_store.dirty:
            try:
                self.settings_store.save()
            except SettingsStoreError as exc:
                QMessageBox.warning(self, self.APP_NAME, str(exc))
        super().closeEvent(event)
