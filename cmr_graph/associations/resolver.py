"""
Fetches the concepts related to one parent record.

Relation kinds:
  association  ids listed in the parent's associations block; one batched
               lookup for all of them, page size equal to the id count
  reference    one id held in a parent field (a subscription's collection)
  children     concepts filtered by the parent's own id (a collection's granules)

The parent's identifiers always come from its already merged record, so no
discovery call is made. With no ids there is no upstream call at all: an
empty id filter would match an unrelated, unfiltered result set.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from cmr_graph.datasource.concepts import ConceptDataSource
from cmr_graph.fields.resolver import pop_page_size
from cmr_graph.models.keymap import Relation
from cmr_graph.models.response import ListEnvelope
from cmr_graph.query.selection import FieldSelection

logger = logging.getLogger("cmr_graph.associations")

IDENTIFIER_FIELD = "conceptId"


def _records(result: Union[ListEnvelope, List[dict]]) -> List[dict]:
    if isinstance(result, ListEnvelope):
        return result.items
    return result


class AssociationResolver:
    """Resolves relation fields of a parent record through the data source."""

    def __init__(self, data_source: ConceptDataSource):
        self.data_source = data_source

    @property
    def default_page_size(self) -> int:
        return self.data_source.config.default_page_size

    def _page_size(self, params: Dict[str, Any]) -> int:
        limit = pop_page_size(params)
        return self.default_page_size if limit is None else limit

    async def resolve(
        self,
        parent: dict,
        relation: Relation,
        selection: FieldSelection,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Union[List[dict], Optional[dict]]:
        """Resolve one relation field for one parent record."""
        if relation.kind == "association":
            return await self._resolve_association(parent, relation, selection, headers)
        if relation.kind == "reference":
            return await self._resolve_reference(parent, relation, selection, headers)
        if relation.kind == "children":
            return await self._resolve_children(parent, relation, selection, headers)
        raise ValueError(f"Unknown relation kind: {relation.kind}")

    def associated_ids(self, parent: dict, relation: Relation) -> List[str]:
        """The ordered ids of `relation` in the parent's associations block."""
        block = parent.get(relation.source or "associations") or {}
        if not isinstance(block, dict):
            return []
        return list(block.get(relation.association_key or "") or [])

    async def _fetch(
        self,
        relation: Relation,
        selection: FieldSelection,
        params: Dict[str, Any],
        headers: Optional[Mapping[str, str]],
    ) -> List[dict]:
        result = await self.data_source.fetch(
            relation.concept_type, selection, params=params, headers=headers
        )
        return _records(result)

    async def _resolve_association(
        self,
        parent: dict,
        relation: Relation,
        selection: FieldSelection,
        headers: Optional[Mapping[str, str]],
    ) -> List[dict]:
        ids = self.associated_ids(parent, relation)
        if not ids:
            logger.debug(
                "%s has no %s associations", parent.get(IDENTIFIER_FIELD), relation.association_key
            )
            return []

        params = selection.params
        pop_page_size(params)
        params[IDENTIFIER_FIELD] = ids
        params["limit"] = len(ids)
        return await self._fetch(relation, selection, params, headers)

    async def _resolve_reference(
        self,
        parent: dict,
        relation: Relation,
        selection: FieldSelection,
        headers: Optional[Mapping[str, str]],
    ) -> Optional[dict]:
        concept_id = parent.get(relation.source or "")
        if not concept_id:
            return None

        params = selection.params
        params[IDENTIFIER_FIELD] = concept_id
        params["limit"] = self._page_size(params)
        records = await self._fetch(relation, selection, params, headers)
        return records[0] if records else None

    async def _resolve_children(
        self,
        parent: dict,
        relation: Relation,
        selection: FieldSelection,
        headers: Optional[Mapping[str, str]],
    ) -> List[dict]:
        if not relation.parameter:
            raise ValueError(f"Children relation to {relation.concept_type} has no parameter")

        params = selection.params
        params[relation.parameter] = parent[IDENTIFIER_FIELD]
        params["limit"] = self._page_size(params)
        return await self._fetch(relation, selection, params, headers)
