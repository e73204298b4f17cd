"""
Issues the flat and/or rich search for a request.

Behavioral Contract:
- The rich call is made only when a requested field needs it
- When both calls are needed they run concurrently and are joined
- Both calls carry the same filters and pagination
- Any failure fails the whole fetch and cancels the other call if it is
  still running; partial results are never returned
"""

import asyncio
import logging
from typing import Mapping, Optional

from cmr_graph.models.keymap import KeyMapping
from cmr_graph.models.request import RequestInfo
from cmr_graph.models.response import RawUpstreamResponse, UpstreamResult
from cmr_graph.upstream.client import FLAT_FORMAT, RICH_FORMAT, CatalogClient

logger = logging.getLogger("cmr_graph.upstream.executor")


class UpstreamQueryExecutor:
    """Fans a RequestInfo out into one or two catalog searches."""

    def __init__(self, client: CatalogClient):
        self.client = client

    async def execute(
        self,
        key_map: KeyMapping,
        request_info: RequestInfo,
        headers: Optional[Mapping[str, str]] = None,
    ) -> UpstreamResult:
        params = request_info.upstream_params()

        async def _search(fmt: str) -> RawUpstreamResponse:
            return await self.client.search(
                key_map.concept_type, key_map.list_field, fmt, params, headers
            )

        logger.debug(
            "Fetching %s (flat=%s, rich=%s)",
            key_map.list_field,
            request_info.needs_flat_format,
            request_info.needs_rich_format,
        )

        tasks = {}
        if request_info.needs_flat_format:
            tasks["flat"] = asyncio.create_task(_search(FLAT_FORMAT))
        if request_info.needs_rich_format:
            tasks["rich"] = asyncio.create_task(_search(RICH_FORMAT))

        try:
            await asyncio.gather(*tasks.values())
        except BaseException:
            # The call still in flight is abandoned, not left running
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        return UpstreamResult(**{name: task.result() for name, task in tasks.items()})
