# tests/conftest.py
from __future__ import annotations

import pytest

from primefinder import runtime


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch):
    """Point the workspace at a temp folder and start from a clean runtime."""
    ws = tmp_path / "workspace"
    monkeypatch.setenv("PRIMEFINDER_HOME", str(ws))
    runtime.reset()
    yield ws
    runtime.reset()
