import os
import sys

import pytest


BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)


@pytest.fixture(autouse=True)
def _isolate_profit_engine_env(monkeypatch):
    # Settings under test come from the test, never the developer's shell.
    for name in list(os.environ):
        if name.startswith("PROFIT_ENGINE_"):
            monkeypatch.delenv(name, raising=False)
