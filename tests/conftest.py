import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "backend"))

import minicompiler


@pytest.fixture
def compile_quiet():
    """Return a helper that compiles source without the console listing."""

    def _run(src: str) -> dict:
        return minicompiler.compile_source(src, verbose=False)

    return _run


@pytest.fixture
def client():
    import app as app_module

    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c
