"""Shared fixtures: an offscreen QApplication and a fake C compiler."""

import os
import stat
import sys
import textwrap

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtTest import QTest  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402


# The fake compiler is called as `<compiler> SRC -o BIN`. It understands a few
# comment directives in SRC:
#   // SYNTAX_ERROR    -> prints a gcc-style error on stderr, exits 1
#   // WARN_ONLY       -> prints a warning on stderr, still produces BIN
#   // OUT: <text>     -> BIN echoes <text>
#   // ERR: <text>     -> BIN echoes <text> on stderr
#   // EXIT: <code>    -> BIN exits with <code>
#   // SLEEP: <secs>   -> BIN execs sleep, so nothing after it runs
FAKE_COMPILER = textwrap.dedent(
    """\
    #!/bin/sh
    src="$1"
    out="$3"
    if grep -q 'SYNTAX_ERROR' "$src"; then
        echo "$src:3:5: error: expected ';' before '}' token" >&2
        exit 1
    fi
    if grep -q 'WARN_ONLY' "$src"; then
        echo "$src:1:1: warning: implicit declaration" >&2
    fi
    printf '#!/bin/sh\\n' > "$out"
    sed -n 's|^// SLEEP: ||p' "$src" | while IFS= read -r secs; do
        printf 'exec sleep %s\\n' "$secs" >> "$out"
    done
    sed -n 's|^// OUT: ||p' "$src" | while IFS= read -r line; do
        printf 'echo "%s"\\n' "$line" >> "$out"
    done
    sed -n 's|^// ERR: ||p' "$src" | while IFS= read -r line; do
        printf 'echo "%s" >&2\\n' "$line" >> "$out"
    done
    sed -n 's|^// EXIT: ||p' "$src" | while IFS= read -r code; do
        printf 'exit %s\\n' "$code" >> "$out"
    done
    chmod +x "$out"
    """
)


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def fake_compiler(tmp_path):
    if sys.platform.startswith("win"):
        pytest.skip("fake compiler is a POSIX shell script")
    path = tmp_path / "fakecc"
    path.write_text(FAKE_COMPILER, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def work_dir(tmp_path):
    target = tmp_path / "work"
    target.mkdir()
    return target


@pytest.fixture
def wait_until(qapp):
    def _wait(predicate, timeout_ms: int = 5000) -> bool:
        waited = 0
        while not predicate() and waited < timeout_ms:
            QTest.qWait(20)
            waited += 20
        return bool(predicate())

    return _wait
