from __future__ import annotations

from quickc.inline_run.compiler_runner import CompileResult

INCLUDE_MARKER = "#include"
UNTITLED_NAME = "untitled.c"
NO_OUTPUT_MESSAGE = "Program finished with no output."


def strip_include_lines(text: str) -> str:
    lines = str(text or "").replace("\r\n", "\n").split("\n")
    kept = [line for line in lines if not line.strip().startswith(INCLUDE_MARKER)]
    return "\n".join(kept).strip()


def rewrite_temp_path(text: str, temp_path: str, display_path: str | None) -> str:
    if not text or not temp_path:
        return str(text or "")
    return text.replace(temp_path, display_path or UNTITLED_NAME)


def format_elapsed(seconds: float) -> str:
    return f"{max(0.0, float(seconds)):.2f}"


def error_message(result: CompileResult) -> str:
    stderr = result.stderr.strip()
    if stderr:
        return stderr
    if result.error:
        return result.error
    return "Unknown error"


def format_inline_success(stdout: str, elapsed_seconds: float) -> str:
    output = strip_include_lines(stdout)
    if not output:
        return ""
    return f"{output} (Execution Time: {format_elapsed(elapsed_seconds)}s)"


def format_inline_error(message: str, elapsed_seconds: float) -> str:
    output = strip_include_lines(message)
    if not output:
        output = "Unknown error"
    return f"Error: {output} (Execution Time: {format_elapsed(elapsed_seconds)}s)"


def format_inline_result(result: CompileResult, display_path: str | None = None) -> tuple[bool, str]:
    """Return ``(is_error, text)`` for an inline annotation; text may be empty."""
    if result.failed:
        message = rewrite_temp_path(error_message(result), result.source_path, display_path)
        return True, format_inline_error(message, result.elapsed_seconds)
    return False, format_inline_success(result.stdout, result.elapsed_seconds)


def format_block_result(result: CompileResult, display_path: str | None = None) -> tuple[bool, str]:
    """Return ``(is_error, message)`` for a block-run notification."""
    if result.failed:
        message = rewrite_temp_path(error_message(result), result.source_path, display_path)
        return True, message.strip() or "Unknown error"
    return False, strip_include_lines(result.stdout) or NO_OUTPUT_MESSAGE
