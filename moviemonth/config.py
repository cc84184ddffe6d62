import os
from dataclasses import dataclass
from typing import Any, Optional

from google import genai

from moviemonth.errors import ConfigurationError

DEFAULT_PROXY_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
)


@dataclass
class GeminiSettings:
    model_name: str = "gemini-2.5-flash"
    response_mime_type: str = "application/json"
    api_key_env: str = "API_KEY"


@dataclass
class ProxySettings:
    endpoint: str = DEFAULT_PROXY_ENDPOINT
    api_key_env: str = "GOOGLE_API_KEY"


class AppSettings:
    """Runtime settings for the form, the cache and the proxy endpoint.

    Values come from the environment first and may then be overridden by a
    Hydra/OmegaConf node through :meth:`update_from_config`.  The two API
    credentials are intentionally separate and are only looked up when a
    client is actually built.
    """

    def __init__(self) -> None:
        self.locale: str = os.getenv("MOVIEMONTH_LOCALE", "es").lower()
        self.cache_dir: str = os.getenv("MOVIE_CACHE_DIR", ".cache/movies")
        self.host: str = os.getenv("MOVIEMONTH_HOST", "127.0.0.1")
        self.port: int = int(os.getenv("MOVIEMONTH_PORT", "8000"))
        self.log_level: str = os.getenv("MOVIEMONTH_LOG_LEVEL", "INFO").upper()

        self.gemini = GeminiSettings(
            model_name=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            response_mime_type=os.getenv("GEMINI_RESPONSE_MIME_TYPE", "application/json"),
        )
        self.proxy = ProxySettings(
            endpoint=os.getenv("PROXY_ENDPOINT", DEFAULT_PROXY_ENDPOINT),
        )

    def _get_attr(self, cfg: Any, key: str, default: Any = None) -> Any:
        if cfg is None:
            return default
        if isinstance(cfg, dict):
            return cfg.get(key, default)
        try:
            return cfg.get(key, default)
        except AttributeError:
            return getattr(cfg, key, default)

    def update_from_config(self, cfg: Any) -> None:
        if cfg is None:
            return

        locale = self._get_attr(cfg, "locale", None)
        if locale:
            self.locale = str(locale).lower()

        cache_dir = self._get_attr(cfg, "cache_dir", None)
        if cache_dir:
            self.cache_dir = str(cache_dir)

        log_level = self._get_attr(cfg, "log_level", None)
        if log_level:
            self.log_level = str(log_level).upper()

        server = self._get_attr(cfg, "server", None)
        host = self._get_attr(server, "host", None)
        if host:
            self.host = str(host)
        port = self._get_attr(server, "port", None)
        if port is not None:
            self.port = int(port)

        model = self._get_attr(cfg, "model", None)
        model_name = self._get_attr(model, "name", None)
        if model_name:
            self.gemini.model_name = model_name
        response_mime_type = self._get_attr(model, "response_mime_type", None)
        if response_mime_type:
            self.gemini.response_mime_type = response_mime_type
        gemini_key_env = self._get_attr(model, "api_key_env", None)
        if gemini_key_env:
            self.gemini.api_key_env = gemini_key_env

        proxy = self._get_attr(cfg, "proxy", None)
        endpoint = self._get_attr(proxy, "endpoint", None)
        if endpoint:
            self.proxy.endpoint = endpoint
        proxy_key_env = self._get_attr(proxy, "api_key_env", None)
        if proxy_key_env:
            self.proxy.api_key_env = proxy_key_env

    @property
    def model_name(self) -> str:
        return self.gemini.model_name

    def gemini_api_key(self) -> Optional[str]:
        return os.getenv(self.gemini.api_key_env)

    def proxy_api_key(self) -> str:
        """Return the proxy credential, raising when the environment lacks it."""
        key = os.getenv(self.proxy.api_key_env)
        if not key:
            raise ConfigurationError(
                f"Environment variable {self.proxy.api_key_env} is not set."
            )
        return key


def create_genai_client(settings: AppSettings) -> "genai.Client":
    """Build the Gemini client used by the birthdate form."""
    key = settings.gemini_api_key()
    if not key:
        raise ConfigurationError(
            f"Environment variable {settings.gemini.api_key_env} is not set."
        )
    return genai.Client(api_key=key)
