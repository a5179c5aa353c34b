import pytest

from config import Settings
from fines import MS_PER_DAY
from library import Library

# 2023-11-14T22:13:20Z
NOW_MS = 1_700_000_000_000


class FakeClock:
    """Callable time source that only moves when a test moves it."""

    def __init__(self, now: int = NOW_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, days: int = 0, ms: int = 0) -> None:
        self.now += days * MS_PER_DAY + ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_file(tmp_path):
    # Each test gets its own database file
    return str(tmp_path / "library_test.db")


@pytest.fixture
def empty_lib(db_file, clock):
    """A Library with nothing loaded or seeded."""
    return Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))


@pytest.fixture
def lib(empty_lib):
    """A Library seeded with the sample data."""
    empty_lib.initialize()
    yield empty_lib
    empty_lib.shutdown_save()
