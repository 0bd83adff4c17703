"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Add src to the Python path
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FAKE_WAFFLES = FIXTURES_DIR / "fake_waffles.py"


class RecordingOutput:
    """Output sink that records every line."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def accept(self, line: str) -> None:
        self.lines.append(line)


@pytest.fixture
def output() -> RecordingOutput:
    """Fresh recording output sink."""
    return RecordingOutput()


@pytest.fixture
def fake_waffles(tmp_path: Path) -> Path:
    """Executable waffles.sh stand-in that runs fixtures/fake_waffles.py."""
    script = tmp_path / "waffles.sh"
    script.write_text(
        "#!/bin/sh\n"
        f'exec "{sys.executable}" "{FAKE_WAFFLES}" "$@"\n'
    )
    script.chmod(0o755)
    return script


@pytest.fixture(autouse=True)
def _reset_global_config(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from WMCP_* settings and the cached global config."""
    import waffles_mcp.config as config_mod

    for name in ("WMCP_WAFFLES_EXEC", "WMCP_OUTPUT_TAIL", "WMCP_DEBUG", "WMCP_LOG_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    config_mod._config = None
    yield
    config_mod._config = None
