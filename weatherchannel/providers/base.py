from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests import Response


class ProviderError(RuntimeError):
    """Base provider error."""


@dataclass
class RequestConfig:
    timeout: float = 30.0
    user_agent: str = "weatherchannel/1.0"


class HttpProvider:
    """Base class for small JSON-over-HTTP collaborators."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or self._build_session(self.request_config)
        self._log = logging.getLogger(self.__class__.__name__)

    def _build_session(self, config: RequestConfig) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = config.user_agent
        return session

    def _handle_response(self, response: Response) -> Response:
        if response.status_code >= 400:
            self._log.error("Provider returned %s: %s", response.status_code, response.text[:200])
            raise ProviderError(f"HTTP {response.status_code}")
        return response

    def _request(self, method: str, url: str, **kwargs) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request timed out", exc_info=exc)
            raise ProviderError("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed", exc_info=exc)
            raise ProviderError("request failed") from exc
        return self._handle_response(response)

    def _json(self, response: Response) -> dict:
        try:
            data = response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise ProviderError("invalid json") from exc
        if not isinstance(data, dict):
            raise ProviderError("unexpected json payload")
        return data


__all__ = ["HttpProvider", "ProviderError", "RequestConfig"]
