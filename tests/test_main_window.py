import json

import pytest
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QMessageBox

from quickc.settings_store import JsonSettingsStore
from quickc.ui.controllers.action_registry import RUN_BLOCK_COMMAND
from quickc.ui.main_window import QuickCWindow

HELLO = """#include <stdio.h>
// OUT: hi
int main(void) {
    printf("hi");
    return 0;
}
"""


@pytest.fixture
def store(tmp_path, fake_compiler, work_dir):
    settings = JsonSettingsStore(tmp_path / "settings.json")
    settings.load()
    settings.set("quickc.compilerPath", fake_compiler)
    settings.set("quickc.executionDelay", 40)
    settings.set("quickc.tempDirectory", str(work_dir))
    return settings


@pytest.fixture
def make_window(qapp, store):
    windows = []

    def _make():
        window = QuickCWindow(settings_store=store)
        windows.append(window)
        return window

    yield _make
    for window in windows:
        window.editor.document().setModified(False)
        window.close()
        window.deleteLater()


@pytest.fixture
def message_boxes(monkeypatch):
    shown = []
    monkeypatch.setattr(QMessageBox, "information", lambda _parent, title, text: shown.append(("info", title, text)))
    monkeypatch.setattr(QMessageBox, "critical", lambda _parent, title, text: shown.append(("critical", title, text)))
    return shown


def _move_to_line(window: QuickCWindow, line: int) -> None:
    editor = window.editor
    cursor = editor.textCursor()
    cursor.setPosition(editor.document().findBlockByNumber(line).position())
    editor.setTextCursor(cursor)


def _select_all(window: QuickCWindow) -> None:
    cursor = window.editor.textCursor()
    cursor.select(QTextCursor.SelectionType.Document)
    window.editor.setTextCursor(cursor)


def test_cursor_on_printf_line_shows_output(make_window, wait_until, work_dir):
    window = make_window()
    window.editor.setPlainText(HELLO)
    _move_to_line(window, 3)

    assert wait_until(lambda: window.editor.inline_annotation() is not None)
    annotation = window.editor.inline_annotation()
    assert annotation.line == 3
    assert annotation.color == "grey"
    assert annotation.text.startswith("hi (Execution Time: ")
    assert list(work_dir.iterdir()) == []


def test_moving_off_marker_line_clears_annotation(make_window, wait_until):
    window = make_window()
    window.editor.setPlainText(HELLO)
    _move_to_line(window, 3)
    assert wait_until(lambda: window.editor.inline_annotation() is not None)

    _move_to_line(window, 4)
    assert wait_until(lambda: window.editor.inline_annotation() is None)


def test_compile_error_is_red(make_window, wait_until):
    window = make_window()
    window.editor.setPlainText(HELLO.replace("// OUT: hi", "// SYNTAX_ERROR"))
    _move_to_line(window, 3)

    assert wait_until(lambda: window.editor.inline_annotation() is not None)
    annotation = window.editor.inline_annotation()
    assert annotation.color == "red"
    assert annotation.text.startswith("Error: untitled.c:3:5: error")


def test_run_block_without_selection(make_window, message_boxes):
    window = make_window()
    window.editor.setPlainText(HELLO)
    assert window.execution_controller.run_selected_block() is False
    assert message_boxes == [("critical", "QuickC", "No C code selected to execute.")]


def test_run_block_shows_output(make_window, message_boxes, wait_until):
    window = make_window()
    window.editor.setPlainText(HELLO)
    _select_all(window)

    assert window.execution_controller.run_selected_block() is True
    assert wait_until(lambda: message_boxes)
    assert message_boxes == [("info", "QuickC", "hi")]


def test_run_block_error_uses_critical_box(make_window, message_boxes, wait_until):
    window = make_window()
    window.editor.setPlainText(HELLO.replace("// OUT: hi", "// SYNTAX_ERROR"))
    _select_all(window)

    window.execution_controller.run_selected_block()
    assert wait_until(lambda: message_boxes)
    kind, _title, text = message_boxes[0]
    assert kind == "critical"
    assert "error: expected ';'" in text
    assert window.editor.inline_annotation() is None


def test_run_block_action_has_no_default_shortcut(make_window):
    window = make_window()
    assert window._act_run_block.objectName() == RUN_BLOCK_COMMAND
    assert window._act_run_block.shortcut().isEmpty()


def test_run_block_shortcut_from_keybindings(store, make_window):
    store.set("keybindings.quickc.runBlock", ["Ctrl+Alt+R"])
    window = make_window()
    assert window._act_run_block.shortcut().toString() == "Ctrl+Alt+R"


def test_open_and_save_file(make_window, tmp_path):
    source = tmp_path / "prog.c"
    source.write_text(HELLO, encoding="utf-8")
    window = make_window()

    assert window.open_file(str(source)) is True
    assert window.editor.file_path == str(source)
    assert window.settings_store.get("window.last_file") == str(source)

    window.editor.setPlainText(HELLO + "// edited\n")
    assert window.save_current_editor() is True
    assert source.read_text(encoding="utf-8").endswith("// edited\n")
    assert window.editor.document().isModified() is False


def test_close_persists_window_size(make_window, tmp_path):
    window = make_window()
    window.resize(800, 600)
    window.close()
    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert saved["window"]["width"] == 800
    assert saved["window"]["height"] == 600


def test_startup_file_prefers_argument_then_last_file(store, tmp_path):
    from main import _startup_file

    first = tmp_path / "a.c"
    second = tmp_path / "b.c"
    first.write_text(HELLO, encoding="utf-8")
    second.write_text(HELLO, encoding="utf-8")
    store.set("window.last_file", str(second))

    assert _startup_file([str(first)], store) == str(first.resolve())
    assert _startup_file([], store) == str(second)
    assert _startup_file([str(tmp_path / "missing.c")], store) == str(second)
    store.set("window.last_file", str(tmp_path / "gone.c"))
    assert _startup_file([], store) is None
