from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypedDict

from quickc.inline_run.settings_schema import QuickCRunSettings, default_quickc_settings

SETTINGS_PATH_ENV = "QUICKC_SETTINGS"


class EditorSettings(TypedDict, total=False):
    font_family: str
    font_size: int
    background_color: str


class WindowSettings(TypedDict, total=False):
    width: int
    height: int
    last_file: str


class QuickCSettings(TypedDict, total=False):
    quickc: QuickCRunSettings
    editor: EditorSettings
    window: WindowSettings
    keybindings: dict[str, dict[str, list[str]]]


@dataclass(slots=True, frozen=True)
class SettingsPaths:
    app_dir: Path
    settings_filename: str = "settings.json"
    settings_file: Path = field(init=False)

    def __post_init__(self) -> None:
        app_dir = Path(self.app_dir).expanduser().resolve()
        object.__setattr__(self, "app_dir", app_dir)
        object.__setattr__(self, "settings_file", app_dir / self.settings_filename)


def default_settings_path() -> Path:
    override = str(os.environ.get(SETTINGS_PATH_ENV) or "").strip()
    if override:
        return Path(override).expanduser()
    return SettingsPaths(app_dir=Path.home() / ".quickc").settings_file


def default_settings() -> QuickCSettings:
    defaults: QuickCSettings = {
        "quickc": default_quickc_settings(),
        "editor": {
            "font_family": "Monospace",
            "font_size": 11,
            "background_color": "#1E1E1E",
        },
        "window": {
            "width": 960,
            "height": 720,
            "last_file": "",
        },
        # No default shortcut for block runs; users bind one here.
        "keybindings": {
            "quickc": {
                "runBlock": [],
            },
        },
    }
    return deepcopy(defaults)

