"""Key casing helpers shared by the merger and the catalog client."""

import re
from typing import Any

# Acronym runs, capitalized or lowercase words, remaining capitals, digits
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
_CAPITAL = re.compile(r"(?<!^)(?=[A-Z])")


def camel_case(name: str) -> str:
    """`concept-id`, `concept_id` and `ConceptId` all become `conceptId`."""
    words = _WORD.findall(name)
    if not words:
        return name
    head, *tail = words
    return head.lower() + "".join(w.capitalize() for w in tail)


def snake_case(name: str) -> str:
    """`collectionConceptId` becomes `collection_concept_id`."""
    return _CAPITAL.sub("_", name).lower()


def camelize_keys(value: Any, deep: bool = True) -> Any:
    """Camel-case the keys of a mapping, at every nesting level when `deep`."""
    if isinstance(value, dict):
        return {
            camel_case(key): (camelize_keys(item, deep) if deep else item)
            for key, item in value.items()
        }
    if isinstance(value, list) and deep:
        return [camelize_keys(item, deep) for item in value]
    return value
