from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fetchxml.query import reset_id_counter


@pytest.fixture(autouse=True)
def _fresh_ids():
    reset_id_counter()
    yield
    reset_id_counter()
