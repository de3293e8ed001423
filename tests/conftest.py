import io
import sys
from pathlib import Path

# Ensure the src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


import pytest

from burpsuite_kit.core.config import Settings
from burpsuite_kit.http_history import Items

HISTORY_FILES = PROJECT_ROOT / "tests" / "fixtures" / "http_history_files"


@pytest.fixture
def history_v1_7_36() -> Path:
    """Return path to a Burp Suite Community 1.7.36 export."""
    return HISTORY_FILES / "burpsuite_community_v1.7.36.xml"


@pytest.fixture
def history_v2020_12_1() -> Path:
    """Return path to a Burp Suite Community 2020.12.1 export."""
    return HISTORY_FILES / "burpsuite_community_v2020.12.1.xml"


@pytest.fixture
def small_chunks() -> Settings:
    """Settings that feed the tokenizer a few bytes at a time."""
    return Settings(read_chunk_size=7)


@pytest.fixture
def open_items():
    """Return a factory building :class:`Items` over in-memory bytes."""

    def _open(data: bytes, **kwargs) -> Items:
        return Items(io.BytesIO(data), **kwargs)

    return _open
