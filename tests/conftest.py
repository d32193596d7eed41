from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_auto_shutdown_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Options from the developer's shell must not leak into tests.
    for name in list(os.environ):
        if name.startswith("SERVER_AUTO_SHUTDOWN_"):
            monkeypatch.delenv(name)
