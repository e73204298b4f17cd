"""
Turns a field selection into a RequestInfo.

Decides, per request, which upstream formats are needed:
- A field the rich format alone supplies forces the rich call.
- The flat call is made unless the concept type's rich format is a
  superset of its flat format and the rich call is already needed.

Unknown field names are dropped rather than rejected, so selections that
reference fields this key map does not know yet keep working.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from cmr_graph.models.keymap import KeyMapping
from cmr_graph.models.request import Pagination, RequestInfo
from cmr_graph.query.selection import FieldSelection

logger = logging.getLogger("cmr_graph.fields.resolver")

IDENTIFIER_FIELD = "conceptId"
DEFAULT_PAGE_SIZE = 20

# Envelope fields of a list response, never sent upstream
ENVELOPE_FIELDS = ("count", "items")

# Caller names for the page size, highest precedence first
PAGE_SIZE_ALIASES = ("limit", "first", "pageSize", "page_size")


def record_selections(selection: FieldSelection, is_list: bool) -> List[FieldSelection]:
    """The selections that name record fields."""
    if is_list:
        items = selection.child("items")
        if items is not None:
            return items.selections
    return [s for s in selection.selections if s.name not in ENVELOPE_FIELDS]


def pop_page_size(params: Dict[str, Any]) -> Optional[int]:
    """Remove every page size alias from `params` and return the winning value."""
    found = [params.pop(alias, None) for alias in PAGE_SIZE_ALIASES]
    return next((value for value in found if value is not None), None)


def _split_params(params: Dict[str, Any]) -> tuple:
    filters = dict(params)
    limit = pop_page_size(filters)
    offset = filters.pop("offset", None)
    return filters, limit, offset


def parse_requested_fields(
    selection: FieldSelection,
    key_map: KeyMapping,
    params: Optional[Dict[str, Any]] = None,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> RequestInfo:
    """Build the RequestInfo for one selection against one key map."""
    is_list = selection.name != key_map.single_field

    requested: Set[str] = {IDENTIFIER_FIELD}
    for field in record_selections(selection, is_list):
        name = field.name
        relation = key_map.relations.get(name)
        if relation is not None:
            # The relation is resolved later from a field on this record
            if relation.source:
                requested.add(relation.source)
            continue
        if not key_map.is_known(name):
            logger.debug("Ignoring unknown %s field: %s", key_map.concept_type, name)
            continue
        requested.add(name)

    needs_rich = any(key_map.is_rich_only(name) for name in requested)
    needs_flat = not (needs_rich and key_map.rich_superset)

    if not needs_rich:
        rich_fields: Set[str] = set()
    elif needs_flat:
        rich_fields = {name for name in requested if key_map.is_rich_only(name)}
    else:
        rich_fields = {name for name in requested if key_map.umm_path(name)}

    filters, limit, offset = _split_params(params or {})
    if is_list and limit is None:
        limit = default_page_size

    return RequestInfo(
        concept_type=key_map.concept_type,
        requested_fields=frozenset(requested),
        rich_fields=frozenset(rich_fields),
        needs_rich_format=needs_rich,
        needs_flat_format=needs_flat,
        is_list=is_list,
        pagination=Pagination(limit=limit, offset=offset),
        filters=filters,
    )
