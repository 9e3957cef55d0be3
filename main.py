import logging
import os
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from quickc.settings_store import JsonSettingsStore
from quickc.ui.main_window import NEW_FILE_TEMPLATE, QuickCWindow

LOG_LEVEL_ENV = "QUICKC_LOG_LEVEL"


def _configure_logging() -> None:
    level_name = str(os.environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="[QuickC] %(levelname)s %(name)s: %(message)s",
    )


def _startup_file(argv: list[str], store: JsonSettingsStore) -> str | None:
    if argv:
        candidate = Path(argv[0]).expanduser()
        if candidate.is_file():
            return str(candidate.resolve())
    last = str(store.get("window.last_file", default="") or "").strip()
    if last and Path(last).is_file():
        return last
    return None


if __name__ == "__main__":
    _configure_logging()
    store = JsonSettingsStore()
    store.load()

    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName(QuickCWindow.APP_NAME)

    window = QuickCWindow(settings_store=store)
    startup = _startup_file(sys.argv[1:], store)
    if startup is None or not window.open_file(startup):
        window.editor.setPlainText(NEW_FILE_TEMPLATE)
        window.editor.document().setModified(False)
    window.show()
    sys.exit(app.exec())
