"""Birthdate form controller: validate, look up the cache, or ask Gemini."""

import enum
import html
import logging
import threading
from datetime import date
from typing import Any, Callable, Optional

from moviemonth.cache import MovieCache
from moviemonth.llm_utils import MovieClient
from moviemonth.movies import MovieResult
from moviemonth.query_key import derive_query_key

logger = logging.getLogger(__name__)


class Messages:
    SELECT_DATE = "Por favor, selecciona una fecha."
    SELECT_PAST_DATE = "Por favor, selecciona una fecha en el pasado."
    NOT_FOUND = (
        "Lo siento, no pude encontrar una película para esa fecha. "
        "Por favor, intenta con otra."
    )
    BUSY = "Ya estamos buscando una película. Espera un momento, por favor."
    ALTERNATIVES_HEADING = "Otras películas populares:"


class SubmitOutcome(str, enum.Enum):
    INVALID = "invalid"
    CACHE_HIT = "cache_hit"
    FETCHED = "fetched"
    FAILED = "failed"
    BUSY = "busy"


class HtmlResultView:
    """Result area and loading indicator rendered as HTML fragments."""

    def __init__(self) -> None:
        self.html = ""
        self.loader_visible = False
        self.result_visible = False
        self.reveal_count = 0

    def show_loader(self) -> None:
        self.loader_visible = True
        self.result_visible = False
        self.html = ""

    def render_message(self, text: str) -> None:
        self.html = f"<p>{html.escape(text)}</p>"

    def render_result(self, result: MovieResult) -> None:
        alternatives_html = ""
        if result.alternatives:
            items = "".join(
                f"<li>{html.escape(movie)}</li>" for movie in result.alternatives
            )
            alternatives_html = (
                f"<h3>{html.escape(Messages.ALTERNATIVES_HEADING)}</h3><ul>{items}</ul>"
            )
        self.html = (
            f"<h2>{html.escape(result.title)}</h2>"
            f"<p>{html.escape(result.description)}</p>"
            f"{alternatives_html}"
        )

    def finish(self) -> None:
        self.loader_visible = False
        self.result_visible = True
        self.reveal_count += 1


class FormController:
    """Handles one birthdate submission at a time.

    All collaborators are injected: the Gemini-backed :class:`MovieClient`,
    the durable :class:`MovieCache`, the view and a ``today`` callable.  A
    submission follows one of three branches (invalid input, cache hit or
    network round-trip); whichever branch runs, the loader ends hidden and
    the result area is revealed exactly once.

    While a Gemini request is in flight, further submissions are rejected
    with :data:`SubmitOutcome.BUSY` instead of issuing overlapping requests.
    """

    def __init__(
        self,
        movie_client: MovieClient,
        cache: MovieCache,
        view_factory: Callable[[], HtmlResultView] = HtmlResultView,
        today: Callable[[], date] = date.today,
        locale: str = "es",
    ) -> None:
        self.movie_client = movie_client
        self.cache = cache
        self.view_factory = view_factory
        self.today = today
        self.locale = locale
        self._in_flight = threading.Lock()

    def max_date(self) -> str:
        return self.today().isoformat()

    @staticmethod
    def _parse_date(value: Any) -> Optional[date]:
        if not value or not isinstance(value, str):
            return None
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None

    def submit(self, date_value: Optional[str], view: Optional[HtmlResultView] = None):
        """Process one form submission and return ``(outcome, view)``."""
        view = view if view is not None else self.view_factory()

        birthdate = self._parse_date(date_value)
        if birthdate is None:
            view.render_message(Messages.SELECT_DATE)
            view.finish()
            return SubmitOutcome.INVALID, view

        if birthdate > self.today():
            view.render_message(Messages.SELECT_PAST_DATE)
            view.finish()
            return SubmitOutcome.INVALID, view

        query_key = derive_query_key(birthdate, self.locale)

        cached = self.cache.get_result(query_key.key)
        if cached is not None:
            logger.debug("Cache hit for %s", query_key)
            view.render_result(cached)
            view.finish()
            return SubmitOutcome.CACHE_HIT, view

        if not self._in_flight.acquire(blocking=False):
            view.render_message(Messages.BUSY)
            view.finish()
            return SubmitOutcome.BUSY, view

        view.show_loader()
        try:
            result = self.movie_client.fetch_movie(query_key.month, query_key.year)
            self.cache.set_result(query_key.key, result)
            view.render_result(result)
            outcome = SubmitOutcome.FETCHED
        except Exception as exc:
            logger.error("Error fetching movie data for %s: %s", query_key, exc)
            view.render_message(Messages.NOT_FOUND)
            outcome = SubmitOutcome.FAILED
        finally:
            self._in_flight.release()
            view.finish()
        return outcome, view
