"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root is on path when running tests without installed package
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from farewatch import dom  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_backend(monkeypatch):
    """Every test starts with no document backend chosen yet."""
    monkeypatch.setattr(dom, "_backend", None)


@pytest.fixture(params=[dom.BACKEND_REGEX, dom.BACKEND_TREE])
def backend(request):
    """Run a test once per document backend."""
    if request.param == dom.BACKEND_TREE:
        pytest.importorskip("bs4")
    return dom.configure_backend(request.param)
