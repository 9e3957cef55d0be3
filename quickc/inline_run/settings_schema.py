from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict


DETECTION_POLICIES = (
    "cursor_line",
    "document",
)

ERROR_COLOR = "red"


class QuickCRunSettings(TypedDict, total=False):
    enabled: bool
    executionDelay: int
    compilerPath: str
    compilerArgs: list[str]
    inlineColor: str
    detectionPolicy: str
    triggerMarkers: list[str]
    tempDirectory: str
    runTimeoutMs: int


def default_quickc_settings() -> QuickCRunSettings:
    return {
        "enabled": True,
        "executionDelay": 300,
        "compilerPath": "gcc",
        "compilerArgs": [],
        "inlineColor": "grey",
        "detectionPolicy": "cursor_line",
        "triggerMarkers": ["printf", "scanf"],
        "tempDirectory": "",
        "runTimeoutMs": 0,
    }


def normalize_quickc_settings(raw: Any) -> QuickCRunSettings:
    defaults = default_quickc_settings()
    data = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    policy = str(data.get("detectionPolicy", defaults["detectionPolicy"]) or defaults["detectionPolicy"]).strip().lower()
    if policy not in DETECTION_POLICIES:
        policy = defaults["detectionPolicy"]

    def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
        try:
            return max(low, min(high, int(value)))
        except Exception:
            return fallback

    def _str_list(value: Any, fallback: list[str]) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return list(fallback)
        return [str(item) for item in value if str(item or "").strip()]

    markers = _str_list(data.get("triggerMarkers"), defaults["triggerMarkers"]) or list(defaults["triggerMarkers"])

    return {
        "enabled": bool(data.get("enabled", defaults["enabled"])),
        "executionDelay": _clamp_int(data.get("executionDelay"), 0, 10000, int(defaults["executionDelay"])),
        "compilerPath": str(data.get("compilerPath") or "").strip() or defaults["compilerPath"],
        "compilerArgs": _str_list(data.get("compilerArgs"), defaults["compilerArgs"]),
        "inlineColor": str(data.get("inlineColor") or "").strip() or defaults["inlineColor"],
        "detectionPolicy": policy,
        "triggerMarkers": markers,
        "tempDirectory": str(data.get("tempDirectory") or "").strip(),
        "runTimeoutMs": _clamp_int(data.get("runTimeoutMs"), 0, 600000, int(defaults["runTimeoutMs"])),
    }


@dataclass(slots=True, frozen=True)
class NormalizedQuickCConfig:
    enabled: bool
    execution_delay_ms: int
    compiler_path: str
    compiler_args: tuple[str, ...]
    inline_color: str
    detection_policy: str
    trigger_markers: tuple[str, ...]
    temp_directory: str
    run_timeout_ms: int

    @property
    def run_timeout_s(self) -> float | None:
        if self.run_timeout_ms <= 0:
            return None
        return self.run_timeout_ms / 1000.0

    @classmethod
    def from_mapping(cls, data: Any) -> "NormalizedQuickCConfig":
        n = normalize_quickc_settings(data)
        return cls(
            enabled=bool(n["enabled"]),
            execution_delay_ms=int(n["executionDelay"]),
            compiler_path=str(n["compilerPath"]),
            compiler_args=tuple(n["compilerArgs"]),
            inline_color=str(n["inlineColor"]),
            detection_policy=str(n["detectionPolicy"]),
            trigger_markers=tuple(n["triggerMarkers"]),
            temp_directory=str(n["tempDirectory"]),
            run_timeout_ms=int(n["runTimeoutMs"]),
        )
