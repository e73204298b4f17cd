"""Per concept type description of where each field lives upstream."""

from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class Relation(BaseModel):
    """A field that resolves to records of another concept type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: str                                       # "association" | "reference" | "children"
    concept_type: str = Field(alias="conceptType")
    source: Optional[str] = None                    # Parent field holding the ids
    association_key: Optional[str] = Field(default=None, alias="associationKey")
    parameter: Optional[str] = None                 # Filter used by "children"


class KeyMapping(BaseModel):
    """
    Immutable field table for one concept type.

    A canonical field is available in the flat format when it is listed in
    `flat_keys`, and in the rich format when `umm_key_mappings` gives it a
    dotted path into the UMM item.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    concept_type: str = Field(alias="conceptType")
    list_field: str = Field(alias="listField")
    single_field: str = Field(alias="singleField")
    flat_identifier: str = Field(default="concept_id", alias="flatIdentifier")
    flat_key_aliases: Dict[str, str] = Field(default={}, alias="flatKeyAliases")
    flat_keys: List[str] = Field(default=[], alias="flatKeys")
    umm_key_mappings: Dict[str, str] = Field(default={}, alias="ummKeyMappings")
    rich_superset: bool = Field(default=False, alias="richSuperset")
    relations: Dict[str, Relation] = {}

    @property
    def rich_only_keys(self) -> Set[str]:
        """Fields that only the rich format can supply."""
        return set(self.umm_key_mappings) - set(self.flat_keys)

    @property
    def flat_only_keys(self) -> Set[str]:
        return set(self.flat_keys) - set(self.umm_key_mappings)

    def is_known(self, name: str) -> bool:
        return name in self.umm_key_mappings or name in self.flat_keys

    def is_rich_only(self, name: str) -> bool:
        return name in self.umm_key_mappings and name not in self.flat_keys

    def umm_path(self, name: str) -> Optional[str]:
        return self.umm_key_mappings.get(name)
