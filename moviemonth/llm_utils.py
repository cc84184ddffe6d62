import logging
from typing import Any

from google.genai import types

from moviemonth.errors import MovieLookupError, MovieParseError
from moviemonth.movies import MOVIE_RESPONSE_SCHEMA, MovieResult, parse_movie_result

logger = logging.getLogger(__name__)

MOVIE_PROMPT_TEMPLATE = (
    "¿Cuál fue la película más famosa y culturalmente significativa estrenada en "
    "{month} de {year}? Proporciona el título de la película, una breve descripción "
    "de dos frases, y una lista de 1 a 2 películas populares alternativas de ese "
    "mismo mes y año."
)


def build_movie_prompt(month: str, year: int) -> str:
    return MOVIE_PROMPT_TEMPLATE.format(month=month, year=year)


class MovieClient:
    """Single-shot structured Gemini query for a month/year.

    Exactly one ``generate_content`` call is made per :meth:`fetch_movie`;
    failures are not retried.  Transport and API errors are wrapped in
    :class:`MovieLookupError`, while a payload that does not match the movie
    schema raises the more specific :class:`MovieParseError`.
    """

    def __init__(
        self,
        client: Any,
        model_name: str = "gemini-2.5-flash",
        response_mime_type: str = "application/json",
    ) -> None:
        self.client = client
        self.model_name = model_name
        self.response_mime_type = response_mime_type

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type=self.response_mime_type,
            response_schema=MOVIE_RESPONSE_SCHEMA,
        )

    def fetch_movie(self, month: str, year: int) -> MovieResult:
        prompt = build_movie_prompt(month, year)
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self._generation_config(),
            )
        except Exception as exc:
            logger.error("Gemini call failed for %s %s: %s", month, year, exc)
            raise MovieLookupError(f"Gemini call failed: {exc}") from exc

        try:
            return parse_movie_result(getattr(response, "text", None))
        except MovieParseError:
            logger.error("Gemini returned an unusable payload for %s %s", month, year)
            raise
