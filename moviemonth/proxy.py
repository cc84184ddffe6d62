import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import requests

from moviemonth.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class ProxyResponse:
    status: int
    body: Any

    def to_bytes(self) -> bytes:
        return json.dumps(self.body, ensure_ascii=False).encode("utf-8")


class ProxyHandler:
    """Stateless forwarder from ``{"prompt": ...}`` to a Gemini REST endpoint.

    The prompt is wrapped verbatim in ``{"contents": [{"parts": [{"text": ...}]}]}``
    and the upstream JSON is relayed with status 200.  Any failure becomes a
    500 with ``{"error": "<message>"}``.  No retry, no timeout.
    """

    def __init__(
        self,
        endpoint: str,
        api_key_provider: Callable[[], str],
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key_provider = api_key_provider
        self.session = session if session is not None else requests.Session()

    @staticmethod
    def _read_prompt(raw_body: Union[bytes, str]) -> Any:
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8")
        payload = json.loads(raw_body)
        if not isinstance(payload, dict) or "prompt" not in payload:
            raise ValueError("Request body must be a JSON object with a 'prompt' field.")
        return payload["prompt"]

    def _forward(self, prompt: Any) -> Any:
        response = self.session.post(
            self.endpoint,
            params={"key": self.api_key_provider()},
            headers={"Content-Type": "application/json"},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Upstream returned a non-JSON body (HTTP {response.status_code})."
            ) from exc

    def handle(self, raw_body: Union[bytes, str]) -> ProxyResponse:
        try:
            prompt = self._read_prompt(raw_body)
            data = self._forward(prompt)
            return ProxyResponse(status=200, body=data)
        except Exception as exc:
            logger.error("Proxy request failed: %s", exc)
            return ProxyResponse(status=500, body={"error": str(exc)})
