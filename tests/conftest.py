"""Root test configuration: markdown file factory and logging reset"""

import logging
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging calls made by CLI tests so later tests log to pytest's capture."""
    yield
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


@pytest.fixture(name="write_md")
def write_md_fixture(tmp_path):
    """Return a helper that writes text (or bytes) to a file under tmp_path."""
    def _write(name: str, content) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path
    return _write
