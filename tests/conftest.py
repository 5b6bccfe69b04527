from datetime import datetime

import pytest

from smart_study.db import init_db


@pytest.fixture
def now():
    """Wednesday 2024-05-15 12:00 local time, in epoch milliseconds."""
    return int(datetime(2024, 5, 15, 12, 0).timestamp() * 1000)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary data directory for tests."""
    return str(tmp_path / "data")


@pytest.fixture
def repo(tmp_db):
    return init_db(tmp_db)
