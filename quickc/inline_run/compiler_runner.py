from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

RUN_KINDS = ("document", "block")
_TEMP_PREFIXES = {
    "document": "quickc_",
    "block": "quickc_block_",
}


@dataclass(slots=True)
class CompileRequest:
    source_text: str
    kind: str = "document"  # document | block
    compiler_path: str = "gcc"
    compiler_args: Sequence[str] = field(default_factory=tuple)
    work_dir: str = ""
    timeout_s: float | None = None


@dataclass(slots=True)
class CompileResult:
    stdout: str = ""
    stderr: str = ""
    exit_failed: bool = False
    error: str | None = None
    elapsed_seconds: float = 0.0
    source_path: str = ""
    binary_path: str = ""

    @property
    def failed(self) -> bool:
        # Any stderr output counts as a failure, warnings included.
        return bool(self.stderr.strip()) or self.error is not None


def binary_path_for(source_path: str) -> str:
    suffix = ".exe" if sys.platform.startswith("win") else ".out"
    return str(Path(source_path).with_suffix(suffix))


def build_compile_command(request: CompileRequest, source_path: str, binary_path: str) -> list[str]:
    return [request.compiler_path, *[str(arg) for arg in request.compiler_args], source_path, "-o", binary_path]


def run_compile(request: CompileRequest) -> CompileResult:
    """Compile ``request.source_text`` and, if that succeeds, run the binary.

    Mirrors ``<compiler> src -o bin && bin``: the program only runs when the
    compiler exits zero. Output of both steps is concatenated. The temp source
    and binary are removed on every path.
    """
    if request.kind not in RUN_KINDS:
        raise ValueError(f"Unknown run kind: {request.kind}")

    start = time.monotonic()
    source_path = _write_temp_source(request)
    binary_path = binary_path_for(source_path)
    result = CompileResult(source_path=source_path, binary_path=binary_path)
    stdout_parts: list[str] = []
    stderr_parts: list[str] = []

    try:
        compile_cmd = build_compile_command(request, source_path, binary_path)
        compile_proc = _run_step(compile_cmd, request.timeout_s, result)
        if compile_proc is not None:
            stdout_parts.append(compile_proc.stdout or "")
            stderr_parts.append(compile_proc.stderr or "")
            if compile_proc.returncode != 0:
                _mark_exit_failure(result, compile_cmd, compile_proc.returncode)
            else:
                run_proc = _run_step([binary_path], request.timeout_s, result)
                if run_proc is not None:
                    stdout_parts.append(run_proc.stdout or "")
                    stderr_parts.append(run_proc.stderr or "")
                    if run_proc.returncode != 0:
                        _mark_exit_failure(result, [binary_path], run_proc.returncode)
    finally:
        result.elapsed_seconds = time.monotonic() - start
        _remove_artifact(source_path, "source")
        if os.path.exists(binary_path):
            _remove_artifact(binary_path, "binary")

    result.stdout = "".join(stdout_parts)
    result.stderr = "".join(stderr_parts)
    return result


def _write_temp_source(request: CompileRequest) -> str:
    work_dir = str(request.work_dir or "").strip() or None
    if work_dir:
        os.makedirs(work_dir, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        prefix=_TEMP_PREFIXES[request.kind],
        suffix=".c",
        dir=work_dir,
        delete=False,
        encoding="utf-8",
    ) as tmp:
        tmp.write(request.source_text)
        return tmp.name


def _run_step(
    command: list[str],
    timeout_s: float | None,
    result: CompileResult,
) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            command,
            capture_output=True,
            text=True,
            errors="replace",
            stdin=subprocess.DEVNULL,
            timeout=timeout_s,
            check=False,
        )
    except subprocess.TimeoutExpired:
        result.exit_failed = True
        result.error = f"Timed out after {timeout_s:g}s: {_command_text(command)}"
    except OSError as exc:
        result.exit_failed = True
        result.error = f"{command[0]}: {exc.strerror or exc}"
    return None


def _mark_exit_failure(result: CompileResult, command: list[str], returncode: int) -> None:
    result.exit_failed = True
    result.error = f"Command failed with exit code {returncode}: {_command_text(command)}"


def _command_text(command: list[str]) -> str:
    return " ".join(f'"{part}"' if " " in part else part for part in command)


def _remove_artifact(path: str, label: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Failed to delete temp %s file %s: %s", label, path, exc)
