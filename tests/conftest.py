import os
import random

import pytest

# Set test environment variables before the server module reads its config
os.environ["ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["CATALOG_FILE"] = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "vocabulary.json"
)

from catalog import Catalog, VocabularyItem  # noqa: E402
from drill_system import DrillSystem  # noqa: E402
from storage import MemoryStorage  # noqa: E402

T0 = 1_700_000_000_000


class FakeClock:
    """Clock returning a fixed epoch-ms time that tests move by hand"""

    def __init__(self, now=T0):
        self.now = now
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.now

    def advance(self, ms):
        self.now += ms


def make_catalog(count):
    return Catalog(VocabularyItem(i, f"word{i}", f"kelime{i}") for i in range(1, count + 1))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def catalog():
    """25 words: part 0 holds ids 1-20 and part 1 holds ids 21-25"""
    return make_catalog(25)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def system(catalog, storage, clock, rng):
    return DrillSystem(catalog, storage, clock=clock, rng=rng, chunk_size=20)


@pytest.fixture
def client(monkeypatch, system):
    import server

    monkeypatch.setattr(server, "system", system)
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c
