"""
Executes a field selection end to end.

Maps the root field to a concept type, fetches merged records through the
concept data source, resolves relation fields for every parent record
concurrently, and projects each record down to exactly the selected fields.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from cmr_graph.associations.resolver import AssociationResolver
from cmr_graph.datasource.concepts import ConceptDataSource
from cmr_graph.fields.resolver import record_selections
from cmr_graph.keymaps.registry import key_map_for_field, load_key_map
from cmr_graph.models.config import CatalogConfig
from cmr_graph.models.keymap import KeyMapping
from cmr_graph.models.response import ListEnvelope
from cmr_graph.query.selection import FieldSelection
from cmr_graph.upstream.client import CatalogClient

logger = logging.getLogger("cmr_graph.query")


def project_value(value: Any, selection: FieldSelection) -> Any:
    """Trim nested dict and list values down to the sub-selection."""
    if not selection.selections or value is None:
        return value
    if isinstance(value, list):
        return [project_value(item, selection) for item in value]
    if isinstance(value, dict):
        return {
            child.name: project_value(value.get(child.name), child)
            for child in selection.selections
        }
    return value


class QueryEngine:
    """Runs root selections against the catalog."""

    def __init__(self, client: CatalogClient, config: Optional[CatalogConfig] = None):
        self.config = config or client.config
        self.data_source = ConceptDataSource(client, self.config)
        self.associations = AssociationResolver(self.data_source)

    async def execute(
        self,
        selection: FieldSelection,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Execute one root selection such as `collections { items { conceptId } }`."""
        key_map = key_map_for_field(selection.name)
        result = await self.data_source.fetch(
            key_map.concept_type, selection, headers=headers
        )

        if isinstance(result, ListEnvelope):
            items_selection = selection.child("items")
            fields = record_selections(selection, is_list=True)
            items = await self._project_records(key_map, result.items, fields, headers)

            if items_selection is None and selection.child("count") is None:
                return items

            response: Dict[str, Any] = {}
            if selection.child("count") is not None:
                response["count"] = result.count
            if items_selection is not None:
                response["items"] = items
            return response

        fields = record_selections(selection, is_list=False)
        records = await self._project_records(key_map, result, fields, headers)
        return records[0] if records else None

    async def _project_records(
        self,
        key_map: KeyMapping,
        records: List[dict],
        fields: List[FieldSelection],
        headers: Optional[Mapping[str, str]],
    ) -> List[dict]:
        relation_fields = [f for f in fields if f.name in key_map.relations]

        resolved: List[Dict[str, Any]] = [{} for _ in records]
        for field in relation_fields:
            # Each parent resolves independently; results land in its own slot
            values = await asyncio.gather(*(
                self._resolve_relation(key_map, record, field, headers)
                for record in records
            ))
            for slot, value in zip(resolved, values):
                slot[field.name] = value

        projected = []
        for record, relations in zip(records, resolved):
            projected.append({
                field.name: (
                    relations[field.name]
                    if field.name in relations
                    else project_value(record.get(field.name), field)
                )
                for field in fields
            })
        return projected

    async def _resolve_relation(
        self,
        key_map: KeyMapping,
        record: dict,
        field: FieldSelection,
        headers: Optional[Mapping[str, str]],
    ) -> Any:
        relation = key_map.relations[field.name]
        target = load_key_map(relation.concept_type)
        value = await self.associations.resolve(record, relation, field, headers)

        if value is None:
            return None
        if isinstance(value, dict):
            fields = record_selections(field, is_list=False)
            projected = await self._project_records(target, [value], fields, headers)
            return projected[0]

        fields = record_selections(field, is_list=True)
        return await self._project_records(target, value, fields, headers)
