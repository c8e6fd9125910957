"""Minimal JSON-RPC 2.0 transport over urllib."""

from __future__ import annotations

import itertools
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Callable, Optional, Sequence

from .client import RequestFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60


class JsonRpcTransport:
    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        opener: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._opener = opener or urllib.request.urlopen
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        return self._url

    def request(self, method: str, params: Sequence[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            self._url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("RPC %s -> %s", method, self._url)

        try:
            with self._opener(request, timeout=self._timeout) as response:
                raw = response.read().decode("utf-8")
        except (urllib.error.URLError, OSError) as exc:
            raise RequestFailure(f"{method} request to {self._url} failed: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RequestFailure(f"{method} returned invalid JSON.") from exc

        if not isinstance(data, dict):
            raise RequestFailure(f"{method} returned an unexpected response.")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RequestFailure(f"{method} failed: {message}")
        if "result" not in data:
            raise RequestFailure(f"{method} returned no result.")
        return data["result"]
