from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
BACKEND = ROOT / 'backend'
sys.path.insert(0, str(BACKEND))

os.environ.setdefault('DEFAULT_TIMEZONE', 'UTC')
os.environ.setdefault('DEFAULT_PERIOD', 'mtd')

from narrator.core.config import get_settings

get_settings.cache_clear()


@pytest.fixture
def reference_now() -> datetime:
    # Yesterday resolves to Thursday 2024-03-14 in UTC.
    return datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)
