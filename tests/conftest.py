import datetime as dt

import pytest

from database import JsonStore
from state import TutorDesk

TODAY = dt.date(2024, 1, 10)


@pytest.fixture
def store(tmp_path):
    return JsonStore(str(tmp_path / "data"))


@pytest.fixture
def desk(store):
    return TutorDesk(store)
