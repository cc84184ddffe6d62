"""Entry point that wires Hydra configuration and launches the MovieMonth server."""

import logging

import hydra
from omegaconf import DictConfig, OmegaConf

from moviemonth.cache import MovieCache
from moviemonth.config import AppSettings, create_genai_client
from moviemonth.controller import FormController
from moviemonth.llm_utils import MovieClient
from moviemonth.proxy import ProxyHandler
from moviemonth.webui.server import start_server

logger = logging.getLogger(__name__)


def build_app(settings: AppSettings):
    """Create the form controller and the proxy handler from ``settings``."""
    movie_client = MovieClient(
        create_genai_client(settings),
        model_name=settings.model_name,
        response_mime_type=settings.gemini.response_mime_type,
    )
    controller = FormController(
        movie_client,
        MovieCache(settings.cache_dir),
        locale=settings.locale,
    )
    proxy = ProxyHandler(settings.proxy.endpoint, settings.proxy_api_key)
    return controller, proxy


@hydra.main(config_path="configs", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    settings = AppSettings()
    settings.update_from_config(cfg)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Configuration:\n%s", OmegaConf.to_yaml(cfg))

    controller, proxy = build_app(settings)
    start_server(settings.host, settings.port, controller, proxy)


if __name__ == "__main__":
    main()
