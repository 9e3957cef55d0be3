from __future__ import annotations

import concurrent.futures
import logging
import queue
from dataclasses import dataclass
from typing import Any

from PySide6.QtCore import QObject, QTimer, Signal

from quickc.inline_run.annotations import InlineAnnotation
from quickc.inline_run.compiler_runner import CompileRequest, run_compile
from quickc.inline_run.detector import TriggerMatch, detect_trigger
from quickc.inline_run.output_formatter import format_block_result, format_inline_error, format_inline_result
from quickc.inline_run.settings_schema import NormalizedQuickCConfig, default_quickc_settings

logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "No C code selected to execute."


@dataclass(slots=True)
class _PendingRun:
    editor_id: str
    source_text: str
    cursor_line: int
    file_path: str
    token: int


@dataclass(slots=True)
class _RunWorkItem:
    editor_id: str
    kind: str  # document | block
    source_text: str
    file_path: str
    token: int
    target_line: int
    cfg: NormalizedQuickCConfig


class InlineRunController(QObject):
    """Debounces editor events and drives the compile/run/annotate pipeline.

    One pending run per editor; each new event restarts that editor's timer.
    Runs already handed to the worker pool are never cancelled, but their
    results are dropped unless their token is still the latest for the editor.
    """

    annotationReady = Signal(str, object)  # editor_id, InlineAnnotation
    annotationCleared = Signal(str)  # editor_id
    blockResultReady = Signal(str, object)  # editor_id, {ok, message}
    runStarted = Signal(str, str)  # editor_id, kind
    statusMessage = Signal(str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="quickc-run")
        self._active_futures: set[concurrent.futures.Future] = set()
        self._result_queue: queue.Queue[dict[str, Any]] = queue.Queue()

        self._result_pump = QTimer(self)
        self._result_pump.setInterval(16)
        self._result_pump.timeout.connect(self._drain_results)
        self._result_pump.start()

        self._debounce_timers: dict[str, QTimer] = {}
        self._pending_by_editor: dict[str, _PendingRun] = {}
        self._latest_token_by_editor: dict[str, int] = {}
        self._token_counter = 0
        self._cfg = NormalizedQuickCConfig.from_mapping(default_quickc_settings())

    def update_settings(self, quickc_cfg: Any) -> None:
        self._cfg = NormalizedQuickCConfig.from_mapping(quickc_cfg)
        if not self._cfg.enabled:
            self.cancel_all(clear=True)

    def request_inline(
        self,
        *,
        editor_id: str,
        source_text: str,
        cursor_line: int,
        file_path: str = "",
    ) -> None:
        key = str(editor_id or "").strip()
        if not key or not self._cfg.enabled:
            return

        self._pending_by_editor[key] = _PendingRun(
            editor_id=key,
            source_text=str(source_text or ""),
            cursor_line=max(0, int(cursor_line or 0)),
            file_path=str(file_path or ""),
            token=self._claim_token(key),
        )
        timer = self._debounce_timers.get(key)
        if timer is None:
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(lambda editor_key=key: self._flush_debounced(editor_key))
            self._debounce_timers[key] = timer
        timer.start(int(self._cfg.execution_delay_ms))

    def request_block(self, *, editor_id: str, selected_text: str, file_path: str = "") -> bool:
        key = str(editor_id or "").strip()
        text = str(selected_text or "")
        if not text.strip():
            self.blockResultReady.emit(key, {"ok": False, "message": NO_SELECTION_MESSAGE})
            return False

        item = _RunWorkItem(
            editor_id=key,
            kind="block",
            source_text=text,
            file_path=str(file_path or ""),
            token=self._next_token(),
            target_line=-1,
            cfg=self._cfg,
        )
        self.statusMessage.emit("Running selected block...")
        return self._start_worker(item)

    def is_pending(self, editor_id: str) -> bool:
        return str(editor_id or "") in self._pending_by_editor

    def cancel_for_editor(self, editor_id: str, *, clear: bool = False) -> None:
        key = str(editor_id or "").strip()
        if not key:
            return
        self._pending_by_editor.pop(key, None)
        self._stop_timer(key)
        self._claim_token(key)
        if clear:
            self.annotationCleared.emit(key)

    def cancel_all(self, *, clear: bool = False) -> None:
        for editor_id in list(set(self._latest_token_by_editor) | set(self._pending_by_editor)):
            self.cancel_for_editor(editor_id, clear=clear)

    def shutdown(self) -> None:
        self.cancel_all(clear=False)
        # Timers are children of this controller and die with it.
        for timer in list(self._debounce_timers.values()):
            timer.stop()
        self._debounce_timers.clear()

        try:
            self._result_pump.stop()
        except Exception:
            pass

        for fut in list(self._active_futures):
            fut.cancel()
        self._active_futures.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ---------- Scheduling ----------

    def _flush_debounced(self, editor_id: str) -> None:
        pending = self._pending_by_editor.pop(editor_id, None)
        if pending is None:
            return
        if pending.token != self._latest_token_by_editor.get(editor_id, 0):
            return

        match = self._detect(pending)
        if match is None:
            self.annotationCleared.emit(editor_id)
            return

        item = _RunWorkItem(
            editor_id=editor_id,
            kind="document",
            source_text=pending.source_text,
            file_path=pending.file_path,
            token=pending.token,
            target_line=match.line,
            cfg=self._cfg,
        )
        self._start_worker(item)

    def _detect(self, pending: _PendingRun) -> TriggerMatch | None:
        return detect_trigger(
            pending.source_text,
            pending.cursor_line,
            policy=self._cfg.detection_policy,
            markers=self._cfg.trigger_markers,
        )

    def _start_worker(self, item: _RunWorkItem) -> bool:
        try:
            fut = self._executor.submit(_run_work_item, item)
        except RuntimeError:
            logger.warning("Run pool is shut down; dropping %s run for %s", item.kind, item.editor_id)
            return False
        self._active_futures.add(fut)
        fut.add_done_callback(lambda future, work=item: self._queue_result(work, future))
        self.runStarted.emit(item.editor_id, item.kind)
        return True

    def _queue_result(self, item: _RunWorkItem, future: concurrent.futures.Future) -> None:
        self._active_futures.discard(future)
        if future.cancelled():
            return
        try:
            payload = future.result()
        except Exception as exc:
            logger.exception("QuickC %s run for %s crashed", item.kind, item.editor_id)
            payload = _failure_payload(item, f"QuickC run failed: {exc}")
        self._result_queue.put(payload)

    def _drain_results(self) -> None:
        while True:
            try:
                payload = self._result_queue.get_nowait()
            except queue.Empty:
                return
            self._handle_worker_result(payload)

    def _handle_worker_result(self, payload: dict[str, Any]) -> None:
        editor_id = str(payload.get("editor_id") or "")
        kind = str(payload.get("kind") or "document")

        if kind == "block":
            ok = bool(payload.get("ok", False))
            if not ok:
                self.annotationCleared.emit(editor_id)
            self.blockResultReady.emit(editor_id, {"ok": ok, "message": str(payload.get("message") or "")})
            self.statusMessage.emit("Block run finished." if ok else "Block run failed.")
            return

        # Only the latest token per editor may touch its annotation.
        token = int(payload.get("token") or 0)
        if token != self._latest_token_by_editor.get(editor_id, 0):
            return

        annotation = payload.get("annotation")
        if isinstance(annotation, InlineAnnotation):
            self.annotationReady.emit(editor_id, annotation)
        else:
            self.annotationCleared.emit(editor_id)

    # ---------- Helpers ----------

    def _claim_token(self, editor_id: str) -> int:
        token = self._next_token()
        self._latest_token_by_editor[editor_id] = token
        return token

    def _next_token(self) -> int:
        self._token_counter += 1
        return self._token_counter

    def _stop_timer(self, editor_id: str) -> None:
        timer = self._debounce_timers.get(editor_id)
        if timer is None:
            return
        timer.stop()


def _run_work_item(item: _RunWorkItem) -> dict[str, Any]:
    cfg = item.cfg
    request = CompileRequest(
        source_text=item.source_text,
        kind=item.kind,
        compiler_path=cfg.compiler_path,
        compiler_args=cfg.compiler_args,
        work_dir=cfg.temp_directory,
        timeout_s=cfg.run_timeout_s,
    )
    result = run_compile(request)
    display_path = item.file_path or None

    if item.kind == "block":
        is_error, message = format_block_result(result, display_path)
        return {
            "editor_id": item.editor_id,
            "kind": item.kind,
            "token": item.token,
            "ok": not is_error,
            "message": message,
        }

    is_error, text = format_inline_result(result, display_path)
    annotation = None
    if text.strip():
        annotation = InlineAnnotation.for_result(
            item.target_line,
            text,
            is_error=is_error,
            inline_color=cfg.inline_color,
        )
    return {
        "editor_id": item.editor_id,
        "kind": item.kind,
        "token": item.token,
        "ok": not is_error,
        "annotation": annotation,
    }


def _failure_payload(item: _RunWorkItem, message: str) -> dict[str, Any]:
    if item.kind == "block":
        return {"editor_id": item.editor_id, "kind": item.kind, "token": item.token, "ok": False, "message": message}
    return {
        "editor_id": item.editor_id,
        "kind": item.kind,
        "token": item.token,
        "ok": False,
        "annotation": InlineAnnotation.for_result(
            item.target_line,
            format_inline_error(message, 0.0),
            is_error=True,
            inline_color=item.cfg.inline_color,
        ),
    }
