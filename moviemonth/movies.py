import json
from typing import List

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from moviemonth.errors import MovieParseError

# --- Structured output schema for Gemini ---

MOVIE_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "movieTitle": types.Schema(
            type=types.Type.STRING,
            description="El título de la película.",
        ),
        "description": types.Schema(
            type=types.Type.STRING,
            description="Una breve descripción o sinopsis de la película.",
        ),
        "alternativeMovies": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            min_items=1,
            max_items=2,
            description=(
                "Una lista de 1 a 2 películas populares alternativas del mismo mes y año."
            ),
        ),
    },
    required=["movieTitle", "description", "alternativeMovies"],
)


# --- Record stored in the cache and rendered by the form ---


class MovieResult(BaseModel):
    """The most significant movie for a month plus up to two alternatives."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(alias="movieTitle", description="Title of the movie.")
    description: str = Field(description="Short two-sentence synopsis.")
    alternatives: List[str] = Field(
        alias="alternativeMovies",
        max_length=2,
        description="Other popular movies released the same month and year.",
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def parse_movie_result(text: str) -> MovieResult:
    """Validate a JSON payload returned by Gemini or read back from the cache."""
    if not text:
        raise MovieParseError("Empty response payload.")
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MovieParseError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MovieParseError(
            f"Expected a JSON object, got {type(payload).__name__}."
        )
    try:
        return MovieResult.model_validate(payload)
    except ValidationError as exc:
        raise MovieParseError(f"Response does not match the movie schema: {exc}") from exc
