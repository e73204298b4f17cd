"""
Folds the flat and rich responses into canonical records.

Records are keyed by concept id in first-appearance order. The flat pass
runs first and is authoritative; the rich pass only writes the fields the
request reads from the rich format, and only when the UMM value is present.
Every key written is lower camel case, at every nesting level.
"""

from typing import Any, Dict, List, Union

from cmr_graph.errors.translator import MalformedResponseError
from cmr_graph.merge.casing import camel_case, camelize_keys
from cmr_graph.models.keymap import KeyMapping
from cmr_graph.models.request import RequestInfo
from cmr_graph.models.response import ListEnvelope, RawUpstreamResponse, UpstreamResult

IDENTIFIER_FIELD = "conceptId"
RICH_IDENTIFIER_PATH = "meta.concept-id"

_MISSING = object()


def deep_get(obj: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted path such as `umm.RelatedUrls` against nested dicts."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return default
    return current


def is_present(value: Any) -> bool:
    """
    False for missing values and for empty strings, lists and dicts, which are
    never written. Zero and False are real values and are written.
    """
    if value is None or value is _MISSING:
        return False
    if isinstance(value, (str, list, dict)) and len(value) == 0:
        return False
    return True


def _merge_flat(
    records: Dict[str, dict],
    response: RawUpstreamResponse,
    key_map: KeyMapping,
) -> None:
    for entry in response.entries:
        concept_id = entry.get(key_map.flat_identifier)
        if not concept_id:
            raise MalformedResponseError(
                f"{key_map.concept_type} entry is missing '{key_map.flat_identifier}'"
            )

        record = camelize_keys(entry, deep=True)
        for flat_name, canonical in key_map.flat_key_aliases.items():
            source_key = camel_case(flat_name)
            if source_key in record:
                record[canonical] = record.pop(source_key)

        records[concept_id] = record


def _merge_rich(
    records: Dict[str, dict],
    response: RawUpstreamResponse,
    request_info: RequestInfo,
    key_map: KeyMapping,
) -> None:
    for entry in response.entries:
        concept_id = deep_get(entry, RICH_IDENTIFIER_PATH)
        if not concept_id:
            raise MalformedResponseError(
                f"{key_map.concept_type} item is missing '{RICH_IDENTIFIER_PATH}'"
            )

        record = records.setdefault(concept_id, {IDENTIFIER_FIELD: concept_id})

        # Sorted so the written key order does not depend on set iteration
        for field in sorted(request_info.rich_fields):
            path = key_map.umm_path(field)
            if not path:
                continue
            value = deep_get(entry, path, _MISSING)
            if is_present(value):
                record[field] = camelize_keys(value, deep=True)


def merge_records(
    upstream: UpstreamResult,
    request_info: RequestInfo,
    key_map: KeyMapping,
) -> List[dict]:
    """Merge both responses into canonical records, in first-appearance order."""
    records: Dict[str, dict] = {}

    if upstream.flat is not None:
        _merge_flat(records, upstream.flat, key_map)

    if upstream.rich is not None:
        _merge_rich(records, upstream.rich, request_info, key_map)

    return list(records.values())


def merge_responses(
    upstream: UpstreamResult,
    request_info: RequestInfo,
    key_map: KeyMapping,
) -> Union[ListEnvelope, List[dict]]:
    """Merged records, wrapped in a `{count, items}` envelope for list requests."""
    records = merge_records(upstream, request_info, key_map)
    if request_info.is_list:
        return ListEnvelope(count=upstream.total_count, items=records)
    return records
