"""
Loads the per concept type field tables.

The tables are data, not code: each concept type has a JSON file next to
this module describing which canonical fields the flat format carries, the
dotted UMM path for every field the rich format carries, and the related
concept fields. Adding a field never requires a logic change.
"""

import json
from pathlib import Path
from typing import Dict, List

from cmr_graph.models.keymap import KeyMapping

_KEYMAP_DIR = Path(__file__).parent

_loaded: Dict[str, KeyMapping] = {}


class UnknownConceptTypeError(LookupError):
    """Raised when no key map exists for a concept type or root field."""
    pass


def available_concept_types() -> List[str]:
    """All concept types that ship a key map, sorted by name."""
    return sorted(p.stem for p in _KEYMAP_DIR.glob("*.json"))


def load_key_map(concept_type: str) -> KeyMapping:
    """Load (once per process) the key map for a concept type."""
    if concept_type in _loaded:
        return _loaded[concept_type]

    path = _KEYMAP_DIR / f"{concept_type}.json"
    if not path.is_file():
        raise UnknownConceptTypeError(f"No key map for concept type: {concept_type}")

    with path.open(encoding="utf-8") as handle:
        key_map = KeyMapping.model_validate(json.load(handle))

    _loaded[concept_type] = key_map
    return key_map


def key_map_for_field(field_name: str) -> KeyMapping:
    """Find the key map whose list or single root field is `field_name`."""
    for concept_type in available_concept_types():
        key_map = load_key_map(concept_type)
        if field_name in (key_map.list_field, key_map.single_field):
            return key_map
    raise UnknownConceptTypeError(f"No concept type exposes the field: {field_name}")
