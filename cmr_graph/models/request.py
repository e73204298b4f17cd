"""What a single incoming request needs from upstream."""

from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: Optional[int] = None
    offset: Optional[int] = None


class RequestInfo(BaseModel):
    """
    Built once per request by the requested fields resolver and consumed by
    the upstream executor and the response merger.
    """

    model_config = ConfigDict(frozen=True)

    concept_type: str
    requested_fields: FrozenSet[str]
    rich_fields: FrozenSet[str] = frozenset()   # Requested fields read from the rich format
    needs_rich_format: bool = False
    needs_flat_format: bool = True
    is_list: bool = True
    pagination: Pagination = Pagination()
    filters: Dict[str, Any] = {}

    def upstream_params(self) -> Dict[str, Any]:
        """Filters plus pagination, shared verbatim by both upstream calls."""
        params = dict(self.filters)
        if self.pagination.limit is not None:
            params["limit"] = self.pagination.limit
        if self.pagination.offset is not None:
            params["offset"] = self.pagination.offset
        return params
