"""
HTTP transport to the CMR search and ingest APIs.

Search:  POST <root>/search/<concept type plural>.<json|umm_json>
Ingest:  PUT  <root>/ingest/providers/<provider>/<concept type plural>/<native id>
Delete:  DELETE the same resource

Non-2xx responses raise UpstreamError with the catalog's message list.
Network failures raised by httpx propagate unchanged.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from cmr_graph.errors.translator import UpstreamError
from cmr_graph.merge.casing import snake_case
from cmr_graph.models.config import CatalogConfig
from cmr_graph.models.response import RawUpstreamResponse

logger = logging.getLogger("cmr_graph.upstream.client")

FLAT_FORMAT = "json"
RICH_FORMAT = "umm_json"

HITS_HEADER = "CMR-Hits"

FORWARDED_HEADERS = ("CMR-Request-Id", "Client-Id", "Echo-Token", "Authorization")

# Caller parameter names that differ from the catalog's
_PARAM_NAMES = {"limit": "page_size"}


def forward_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Keep only the headers the catalog should see, matched case-insensitively."""
    if not headers:
        return {}
    lowered = {key.lower(): value for key, value in headers.items()}
    return {
        name: lowered[name.lower()]
        for name in FORWARDED_HEADERS
        if lowered.get(name.lower())
    }


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(name: str, value: Any, form: Dict[str, Any]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key in sorted(value, key=snake_case):
            _flatten(f"{name}[{snake_case(key)}]", value[key], form)
    elif isinstance(value, (list, tuple)):
        form[f"{name}[]"] = [_encode_value(item) for item in value]
    else:
        form[name] = _encode_value(value)


def encode_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flatten caller params into form fields, ordered by upstream name.

    List values are sent as a repeated `name[]` key and nested mappings as
    `name[key]`, e.g. `options[short_name][ignore_case]=true`.
    """
    form: Dict[str, Any] = {}
    for key in sorted(params, key=lambda k: _PARAM_NAMES.get(k, snake_case(k))):
        _flatten(_PARAM_NAMES.get(key, snake_case(key)), params[key], form)
    return form


def extract_entries(body: Any) -> List[dict]:
    """Entries from a `{feed: {entry: [...]}}` or `{items: [...]}` body."""
    if not isinstance(body, dict):
        return []
    if "feed" in body:
        return list((body.get("feed") or {}).get("entry") or [])
    return list(body.get("items") or [])


def _error_messages(response: httpx.Response) -> List[str]:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("errors"):
        messages = []
        for error in body["errors"]:
            if isinstance(error, dict):
                messages.extend(str(e) for e in error.get("errors", [error]))
            else:
                messages.append(str(error))
        return messages
    return [response.reason_phrase or f"HTTP {response.status_code}"]


class CatalogClient:
    """Thin async wrapper around httpx for the catalog endpoints."""

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or CatalogConfig()
        self._http = http_client or httpx.AsyncClient(
            timeout=self.config.request_timeout_seconds
        )

    @property
    def root_url(self) -> str:
        return self.config.cmr_root_url.rstrip("/")

    async def aclose(self) -> None:
        await self._http.aclose()

    def _check(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        raise UpstreamError(_error_messages(response), response.status_code)

    async def search(
        self,
        concept_type: str,
        list_field: str,
        fmt: str,
        params: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> RawUpstreamResponse:
        """Run one search against the flat or rich endpoint."""
        url = f"{self.root_url}/search/{list_field}.{fmt}"
        request_headers = forward_headers(headers)

        version = self.config.umm_version(concept_type)
        if fmt == RICH_FORMAT and version:
            request_headers["Accept"] = (
                f"application/vnd.nasa.cmr.umm_results+json; version={version}"
            )

        form = encode_params(params)
        logger.debug("POST %s %s", url, form)

        response = await self._http.post(url, data=form, headers=request_headers)
        self._check(response)

        hits = response.headers.get(HITS_HEADER)
        return RawUpstreamResponse(
            total_count=int(hits) if hits else 0,
            entries=extract_entries(response.json()),
        )

    async def ingest(
        self,
        concept_type: str,
        list_field: str,
        provider_id: str,
        native_id: str,
        metadata: dict,
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        """Create or update a concept by native id."""
        url = f"{self.root_url}/ingest/providers/{provider_id}/{list_field}/{native_id}"
        content_type = "application/vnd.nasa.cmr.umm+json"
        version = self.config.umm_version(concept_type)
        if version:
            content_type = f"{content_type}; version={version}"

        request_headers = forward_headers(headers)
        request_headers["Accept"] = "application/json"
        request_headers["Content-Type"] = content_type

        logger.debug("PUT %s", url)
        response = await self._http.put(
            url, content=json.dumps(metadata), headers=request_headers
        )
        self._check(response)
        return response.json()

    async def delete(
        self,
        list_field: str,
        provider_id: str,
        native_id: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        """Delete a concept by native id."""
        url = f"{self.root_url}/ingest/providers/{provider_id}/{list_field}/{native_id}"
        request_headers = forward_headers(headers)
        request_headers["Accept"] = "application/json"

        logger.debug("DELETE %s", url)
        response = await self._http.delete(url, headers=request_headers)
        self._check(response)
        return response.json()
