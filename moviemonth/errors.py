class MovieMonthError(Exception):
    """Base class for all MovieMonth failures."""


class ConfigurationError(MovieMonthError):
    """A required setting or credential is missing."""


class MovieLookupError(MovieMonthError):
    """The Gemini call for a month/year did not produce a movie."""


class MovieParseError(MovieLookupError):
    """Gemini answered, but the payload is not a valid movie result."""


class UpstreamError(MovieMonthError):
    """The proxied generative endpoint could not be reached or understood."""
