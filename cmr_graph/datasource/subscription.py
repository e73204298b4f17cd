"""
Subscription mutations: create, update and delete.

Ingest is an idempotent PUT by native id: a new native id creates the
subscription, an existing one updates it. The provider is taken from the
suffix of a concept id (`C100000-EDSC` -> `EDSC`).
"""

from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from cmr_graph.errors.translator import parse_error
from cmr_graph.keymaps.registry import load_key_map
from cmr_graph.merge.casing import camelize_keys
from cmr_graph.models.config import CatalogConfig
from cmr_graph.models.mutation import MutationResult
from cmr_graph.upstream.client import CatalogClient

CONCEPT_TYPE = "subscription"

# Canonical param name -> UMM-Sub field
_UMM_FIELDS = {
    "collectionConceptId": "CollectionConceptId",
    "emailAddress": "EmailAddress",
    "name": "Name",
    "query": "Query",
    "subscriberId": "SubscriberId",
}


def provider_from_concept_id(concept_id: str) -> str:
    """The provider id is everything after the first dash."""
    _, _, provider = concept_id.partition("-")
    if not provider:
        raise ValueError(f"Cannot determine provider from concept id: {concept_id}")
    return provider


def build_umm_subscription(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        umm_name: params[name]
        for name, umm_name in _UMM_FIELDS.items()
        if params.get(name) is not None
    }


class SubscriptionDataSource:
    """Mutations for subscriptions; reads go through ConceptDataSource."""

    def __init__(self, client: CatalogClient, config: Optional[CatalogConfig] = None):
        self.client = client
        self.config = config or client.config

    async def ingest_subscription(
        self,
        params: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        """Create (no native id given) or update a subscription."""
        try:
            key_map = load_key_map(CONCEPT_TYPE)
            native_id = params.get("nativeId") or str(uuid4())
            provider_id = provider_from_concept_id(params["collectionConceptId"])

            response = await self.client.ingest(
                CONCEPT_TYPE,
                key_map.list_field,
                provider_id,
                native_id,
                build_umm_subscription(params),
                headers,
            )
            return MutationResult.model_validate(camelize_keys(response)).to_record()
        except Exception as error:
            parse_error(error, should_log=self.config.log_errors, re_raise=True)
            raise

    async def delete_subscription(
        self,
        params: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        """Delete a subscription by native id."""
        try:
            key_map = load_key_map(CONCEPT_TYPE)
            provider_id = provider_from_concept_id(params["conceptId"])

            response = await self.client.delete(
                key_map.list_field, provider_id, params["nativeId"], headers
            )
            return MutationResult.model_validate(camelize_keys(response)).to_record()
        except Exception as error:
            parse_error(error, should_log=self.config.log_errors, re_raise=True)
            raise
