"""
The fetch pipeline shared by every concept type.

    resolve requested fields -> fan-out fetch -> merge -> return

The same unit serves top-level queries and the recursive lookups made for
related concepts. Failures are logged through the error translator and then
re-raised for the outer handler.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from cmr_graph.errors.translator import parse_error
from cmr_graph.fields.resolver import parse_requested_fields
from cmr_graph.keymaps.registry import load_key_map
from cmr_graph.merge.merger import merge_responses
from cmr_graph.models.config import CatalogConfig
from cmr_graph.models.response import ListEnvelope
from cmr_graph.query.selection import FieldSelection
from cmr_graph.upstream.client import CatalogClient
from cmr_graph.upstream.executor import UpstreamQueryExecutor


class ConceptDataSource:
    """Fetches merged canonical records for any concept type."""

    def __init__(self, client: CatalogClient, config: Optional[CatalogConfig] = None):
        self.client = client
        self.config = config or client.config
        self.executor = UpstreamQueryExecutor(client)

    async def fetch(
        self,
        concept_type: str,
        selection: FieldSelection,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Union[ListEnvelope, List[dict]]:
        """Run the pipeline for one selection of one concept type."""
        try:
            key_map = load_key_map(concept_type)
            request_info = parse_requested_fields(
                selection,
                key_map,
                params=selection.params if params is None else params,
                default_page_size=self.config.default_page_size,
            )
            upstream = await self.executor.execute(key_map, request_info, headers)
            return merge_responses(upstream, request_info, key_map)
        except Exception as error:
            parse_error(error, should_log=self.config.log_errors, re_raise=True)
            raise
