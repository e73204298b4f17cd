"""What the catalog returns after an ingest or delete."""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class MutationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    concept_id: str = Field(alias="conceptId")
    revision_id: Union[int, str] = Field(alias="revisionId")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)
