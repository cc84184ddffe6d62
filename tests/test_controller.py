import threading
from datetime import date

import pytest

from moviemonth.controller import FormController, HtmlResultView, Messages, SubmitOutcome
from moviemonth.errors import MovieLookupError, MovieParseError
from moviemonth.movies import MovieResult

TODAY = date(2025, 6, 15)


@pytest.fixture
def build_controller(memory_cache):
    def _build(movie_client):
        return FormController(movie_client, memory_cache, today=lambda: TODAY)

    return _build


def assert_revealed_once(view):
    assert view.loader_visible is False
    assert view.result_visible is True
    assert view.reveal_count == 1


@pytest.mark.parametrize(
    "value", [None, "", "   ", "not-a-date", 20240115, ["2024-01-15"], {"date": "2024-01-15"}]
)
def test_empty_date_shows_select_message(build_controller, make_movie_client, memory_cache, value):
    client = make_movie_client()
    controller = build_controller(client)

    outcome, view = controller.submit(value)

    assert outcome is SubmitOutcome.INVALID
    assert view.html == f"<p>{Messages.SELECT_DATE}</p>"
    assert client.calls == []
    assert memory_cache.keys() == []
    assert_revealed_once(view)


def test_future_date_shows_past_date_message(build_controller, make_movie_client, memory_cache):
    client = make_movie_client()
    controller = build_controller(client)

    outcome, view = controller.submit("2025-06-16")

    assert outcome is SubmitOutcome.INVALID
    assert view.html == f"<p>{Messages.SELECT_PAST_DATE}</p>"
    assert client.calls == []
    assert memory_cache.keys() == []
    assert_revealed_once(view)


def test_today_is_accepted(build_controller, make_movie_client, sample_result):
    client = make_movie_client([sample_result])
    controller = build_controller(client)

    outcome, _ = controller.submit("2025-06-15")

    assert outcome is SubmitOutcome.FETCHED
    assert client.calls == [("junio", 2025)]


def test_cache_hit_renders_stored_record_without_network(
    build_controller, make_movie_client, memory_cache, sample_result
):
    memory_cache.set_result("movie-enero-2024", sample_result)
    client = make_movie_client()
    controller = build_controller(client)

    outcome, view = controller.submit("2024-01-03")

    assert outcome is SubmitOutcome.CACHE_HIT
    assert client.calls == []
    expected = HtmlResultView()
    expected.render_result(sample_result)
    assert view.html == expected.html
    assert_revealed_once(view)


def test_cache_miss_fetches_stores_and_renders(
    build_controller, make_movie_client, memory_cache, sample_result
):
    client = make_movie_client([sample_result])
    controller = build_controller(client)

    outcome, view = controller.submit("2024-01-15")

    assert outcome is SubmitOutcome.FETCHED
    assert client.calls == [("enero", 2024)]
    assert memory_cache.keys() == ["movie-enero-2024"]
    assert memory_cache.get_result("movie-enero-2024") == sample_result
    assert "<h2>Cadena perpetua</h2>" in view.html
    assert f"<h3>{Messages.ALTERNATIVES_HEADING}</h3>" in view.html
    assert "<li>Pulp Fiction</li><li>Forrest Gump</li>" in view.html
    assert_revealed_once(view)


def test_second_submission_in_same_month_hits_cache(
    build_controller, make_movie_client, sample_result
):
    client = make_movie_client([sample_result])
    controller = build_controller(client)

    controller.submit("2024-01-02")
    outcome, _ = controller.submit("2024-01-20")

    assert outcome is SubmitOutcome.CACHE_HIT
    assert len(client.calls) == 1


@pytest.mark.parametrize(
    "error",
    [MovieLookupError("offline"), MovieParseError("bad json"), RuntimeError("unexpected")],
)
def test_failed_lookup_writes_nothing_and_shows_fixed_message(
    build_controller, make_movie_client, memory_cache, error
):
    client = make_movie_client([error])
    controller = build_controller(client)

    outcome, view = controller.submit("2024-01-15")

    assert outcome is SubmitOutcome.FAILED
    assert memory_cache.keys() == []
    assert view.html == f"<p>{Messages.NOT_FOUND}</p>"
    assert_revealed_once(view)


def test_result_without_alternatives_omits_heading(build_controller, make_movie_client):
    result = MovieResult(title="Solo", description="Sin alternativas.", alternatives=[])
    controller = build_controller(make_movie_client([result]))

    _, view = controller.submit("2010-05-05")

    assert "<h3>" not in view.html
    assert "<ul>" not in view.html


def test_rendered_fields_are_escaped(build_controller, make_movie_client):
    result = MovieResult(title="<script>", description="a & b", alternatives=["<i>x</i>"])
    controller = build_controller(make_movie_client([result]))

    _, view = controller.submit("2010-05-05")

    assert "<script>" not in view.html
    assert "&lt;script&gt;" in view.html
    assert "a &amp; b" in view.html


def test_submission_while_in_flight_is_rejected(memory_cache, sample_result):
    started = threading.Event()
    release = threading.Event()

    class BlockingClient:
        def __init__(self):
            self.calls = []

        def fetch_movie(self, month, year):
            self.calls.append((month, year))
            started.set()
            release.wait(timeout=5)
            return sample_result

    client = BlockingClient()
    controller = FormController(client, memory_cache, today=lambda: TODAY)
    results = {}

    worker = threading.Thread(
        target=lambda: results.setdefault("first", controller.submit("2024-01-15"))
    )
    worker.start()
    assert started.wait(timeout=5)

    outcome, view = controller.submit("2023-03-10")
    release.set()
    worker.join(timeout=5)

    assert outcome is SubmitOutcome.BUSY
    assert view.html == f"<p>{Messages.BUSY}</p>"
    assert client.calls == [("enero", 2024)]
    assert results["first"][0] is SubmitOutcome.FETCHED


def test_max_date_is_today(build_controller, make_movie_client):
    controller = build_controller(make_movie_client())

    assert controller.max_date() == "2025-06-15"
