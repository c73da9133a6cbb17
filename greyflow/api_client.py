"""Generic HTTP caller for ``api`` nodes."""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from greyflow.config import API_TIMEOUT, CORS_PROXY_URL
from greyflow.errors import ApiCallError
from greyflow.models import ApiRequestConfig

logger = logging.getLogger(__name__)

INPUT_PLACEHOLDER = re.compile(r"\{\{?input\}?\}")
BODY_METHODS = ("POST", "PUT", "PATCH")
MAX_LIST_ITEMS = 5
MAX_DESCRIPTION = 200


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


def substitute_input(template: str, value: str) -> str:
    """Replace ``{{input}}`` / ``{input}`` placeholders with ``value``."""
    return INPUT_PLACEHOLDER.sub(lambda _: value, template)


def build_query_params(params: dict[str, str], value: str) -> dict[str, str]:
    """Substitute the input into each value and drop blank parameters."""
    substituted = {k: substitute_input(v, value) for k, v in params.items()}
    return {k: v for k, v in substituted.items() if v and v.strip()}


def build_headers(config: ApiRequestConfig) -> dict[str, str]:
    headers = dict(config.headers)

    if config.method in BODY_METHODS:
        headers["Content-Type"] = "application/json"

    if config.auth_type == "bearer" and config.auth_value:
        headers["Authorization"] = f"Bearer {config.auth_value}"
    elif config.auth_type == "apikey" and config.auth_value and config.auth_header:
        headers[config.auth_header] = config.auth_value
    elif config.auth_type == "basic" and config.auth_value:
        encoded = base64.b64encode(config.auth_value.encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    return headers


def build_body(config: ApiRequestConfig, value: str) -> str | None:
    if config.method not in BODY_METHODS:
        return None
    if config.body_template:
        return substitute_input(config.body_template, value)
    return json.dumps({"input": value, "query": value, "message": value})


def proxied_url(url: str) -> str:
    return CORS_PROXY_URL.format(url=quote(url, safe=""))


# ---------------------------------------------------------------------------
# Response formatting
# ---------------------------------------------------------------------------


def _scalar(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _format_key(key: str) -> str:
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return spaced[:1].upper() + spaced[1:]


def _format_item(item: Any, index: int) -> str:
    if not isinstance(item, dict):
        return _scalar(item)

    title = item.get("title") or item.get("name") or item.get("summary") or f"Item {index + 1}"
    description = item.get("description") or item.get("content") or item.get("body") or ""
    if not description:
        return _scalar(title)

    description = _scalar(description)
    if len(description) > MAX_DESCRIPTION:
        description = description[:MAX_DESCRIPTION] + "..."
    return f"{_scalar(title)}\n{description}"


def format_api_response(data: Any) -> str:
    """Render a decoded JSON body as readable text."""
    if isinstance(data, list):
        if not data:
            return "No results found"
        return "\n\n".join(_format_item(item, i) for i, item in enumerate(data[:MAX_LIST_ITEMS]))

    if isinstance(data, dict):
        for wrapper in ("data", "results", "items"):
            if data.get(wrapper):
                return format_api_response(data[wrapper])

        if data.get("error"):
            return f"Error: {_scalar(data['error'])}"
        if data.get("message") and data.get("status") == "error":
            return f"Error: {_scalar(data['message'])}"

        lines = []
        for key, value in data.items():
            if value is None:
                continue
            if isinstance(value, (dict, list)):
                lines.append(f"{_format_key(key)}: {json.dumps(value, separators=(',', ':'))}")
            else:
                lines.append(f"{_format_key(key)}: {_scalar(value)}")
        return "\n".join(lines) or json.dumps(data, indent=2)

    return _scalar(data)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class ApiClient:
    """Issues one templated request per ``call`` and returns normalized text."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = API_TIMEOUT):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def call(self, endpoint: str, value: str, config: ApiRequestConfig | None = None) -> str:
        config = config or ApiRequestConfig()
        url = substitute_input(endpoint, quote(value, safe=""))
        params: dict[str, str] = {}
        if config.method == "GET" and config.query_params:
            params = build_query_params(config.query_params, value)

        if config.use_cors_proxy:
            url = proxied_url(str(httpx.URL(url, params=params)))
            params = {}

        logger.info(f"Making {config.method} request to: {url}")
        try:
            response = await self.client.request(
                config.method,
                url,
                params=params or None,
                headers=build_headers(config),
                content=build_body(config, value),
            )
        except httpx.HTTPError as e:
            hint = (
                "The CORS proxy failed to connect to the API."
                if config.use_cors_proxy
                else "Check the endpoint URL and your network connection."
            )
            logger.error(f"Custom API call to {endpoint} failed: {e}")
            raise ApiCallError(f"Network error: Unable to connect to {endpoint}. {hint}") from e

        if response.is_error:
            raise ApiCallError(
                f"API request failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        text = response.text
        if config.response_format != "json":
            return text
        try:
            data = json.loads(text)
        except ValueError:
            return text
        return format_api_response(data)

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()


async def call_http(endpoint: str, value: str, config: ApiRequestConfig | None = None) -> str:
    """One-shot convenience wrapper around ``ApiClient``."""
    api = ApiClient()
    try:
        return await api.call(endpoint, value, config)
    finally:
        await api.aclose()
