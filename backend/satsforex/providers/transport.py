from __future__ import annotations

import json
import socket
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from satsforex.config.settings import RelayStrategy
from satsforex.errors import PayloadError


Opener = Callable[[Request, float], bytes]

# Exceptions that mean "this transport did not answer in time".
TIMEOUT_ERRORS = (TimeoutError, socket.timeout)


def default_opener(request: Request, timeout: float) -> bytes:
    with urlopen(request, timeout=timeout) as response:
        return response.read()


def render_url(strategy: RelayStrategy, target_url: str) -> str:
    url = quote(target_url, safe="") if strategy.quote_target else target_url
    return strategy.url_template.format(url=url)


def build_request(strategy: RelayStrategy, target_url: str, headers: dict[str, str]) -> Request:
    request_headers = {"Accept": "application/json"}
    if strategy.forward_headers:
        request_headers.update(headers)
    elif "User-Agent" in headers:
        request_headers["User-Agent"] = headers["User-Agent"]
    return Request(render_url(strategy, target_url), headers=request_headers)


def decode_body(strategy: RelayStrategy, body: bytes) -> Any:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadError(f"{strategy.name}: response is not JSON ({exc})") from exc

    if strategy.unwrap_field is None:
        return payload

    if not isinstance(payload, dict) or strategy.unwrap_field not in payload:
        raise PayloadError(f"{strategy.name}: envelope has no '{strategy.unwrap_field}' field")
    inner = payload[strategy.unwrap_field]
    if isinstance(inner, (dict, list)):
        return inner
    if not isinstance(inner, str) or not inner.strip():
        raise PayloadError(f"{strategy.name}: envelope '{strategy.unwrap_field}' is empty")
    try:
        return json.loads(inner)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"{strategy.name}: relayed body is not JSON ({exc})") from exc


def classify_error(exc: BaseException) -> str:
    if isinstance(exc, TIMEOUT_ERRORS):
        return "timeout"
    if isinstance(exc, HTTPError):
        return "http_error"
    if isinstance(exc, URLError):
        if isinstance(exc.reason, TIMEOUT_ERRORS):
            return "timeout"
        return "network_error"
    if isinstance(exc, (PayloadError, ValueError, ArithmeticError)):
        return "invalid_payload"
    return "network_error"


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, HTTPError):
        return f"HTTP {exc.code}"
    if isinstance(exc, URLError):
        return f"URL error: {exc.reason}"
    return str(exc) or exc.__class__.__name__
