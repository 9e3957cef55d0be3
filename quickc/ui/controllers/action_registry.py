"""Central QAction/QMenu construction for the main window."""

from __future__ import annotations

from typing import Any

from PySide6.QtGui import QAction, QKeySequence

RUN_BLOCK_COMMAND = "quickc.runBlock"


def _sequences_for(keybindings: Any, scope: str, action_id: str) -> list[QKeySequence]:
    if not isinstance(keybindings, dict):
        return []
    scoped = keybindings.get(scope)
    if not isinstance(scoped, dict):
        return []
    raw = scoped.get(action_id)
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []

    seen_texts: set[str] = set()
    sequences: list[QKeySequence] = []
    for item in raw:
        qseq = QKeySequence(str(item or "").strip())
        text = qseq.toString()
        if not text or text in seen_texts:
            continue
        seen_texts.add(text)
        sequences.append(qseq)
    return sequences


class ActionRegistry:
    @staticmethod
    def _register_shortcut_action(ide: Any, action: QAction, *, scope: str, action_id: str) -> None:
        specs = getattr(ide, "_shortcut_action_specs", None)
        if not isinstance(specs, list):
            specs = []
            ide._shortcut_action_specs = specs
        specs.append({"action": action, "scope": scope, "action_id": action_id})

    @staticmethod
    def apply_keybindings(main_window: Any) -> None:
        ide = main_window
        specs = getattr(ide, "_shortcut_action_specs", [])
        keybindings = ide.settings_store.get("keybindings", default={})
        for spec in specs:
            action = spec.get("action")
            if not isinstance(action, QAction):
                continue
            sequences = _sequences_for(keybindings, spec["scope"], spec["action_id"])
            if not sequences:
                action.setShortcut(QKeySequence())
            elif len(sequences) == 1:
                action.setShortcut(sequences[0])
            else:
                action.setShortcuts(sequences)

    @staticmethod
    def create_actions(main_window) -> None:
        ide = main_window
        ide._shortcut_action_specs = []
        menubar = ide.menuBar()

        file_menu = menubar.addMenu("&File")

        act_new = QAction("New File", ide)
        act_new.setShortcut(QKeySequence.New)
        act_new.triggered.connect(ide.new_file)
        file_menu.addAction(act_new)

        act_open = QAction("Open File...", ide)
        act_open.setShortcut(QKeySequence.Open)
        act_open.triggered.connect(ide.open_file_dialog)
        file_menu.addAction(act_open)

        act_save = QAction("Save", ide)
        act_save.setShortcut(QKeySequence.Save)
        act_save.triggered.connect(ide.save_current_editor)
        file_menu.addAction(act_save)

        act_save_as = QAction("Save As...", ide)
        act_save_as.triggered.connect(ide.save_current_editor_as)
        file_menu.addAction(act_save_as)

        file_menu.addSeparator()

        act_exit = QAction("Exit", ide)
        act_exit.triggered.connect(ide.close)
        file_menu.addAction(act_exit)

        run_menu = menubar.addMenu("&Run")

        act_run_block = QAction("Run Selected Block", ide)
        act_run_block.setObjectName(RUN_BLOCK_COMMAND)
        act_run_block.triggered.connect(ide.execution_controller.run_selected_block)
        ActionRegistry._register_shortcut_action(ide, act_run_block, scope="quickc", action_id="runBlock")
        run_menu.addAction(act_run_block)
        ide.addAction(act_run_block)
        ide._act_run_block = act_run_block

        ActionRegistry.apply_keybindings(ide)
