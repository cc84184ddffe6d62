import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from moviemonth.cache import MemoryMovieCache  # noqa: E402
from moviemonth.movies import MovieResult  # noqa: E402



class FakeModels:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeGenAIClient:
    def __init__(self, outcomes=()):
        self.models = FakeModels(outcomes)


class FakeMovieClient:
    """Stands in for :class:`MovieClient` and records every lookup."""

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.calls = []

    def fetch_movie(self, month, year):
        self.calls.append((month, year))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_text_response(text):
    return SimpleNamespace(text=text)


@pytest.fixture
def sample_result():
    return MovieResult(
        title="Cadena perpetua",
        description="Un banquero es condenado injustamente. Encuentra esperanza en prisión.",
        alternatives=["Pulp Fiction", "Forrest Gump"],
    )


@pytest.fixture
def memory_cache():
    return MemoryMovieCache()


@pytest.fixture
def make_genai_client():
    return FakeGenAIClient


@pytest.fixture
def make_movie_client():
    return FakeMovieClient


@pytest.fixture
def text_response():
    return make_text_response
