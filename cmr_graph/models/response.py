"""Upstream responses and the list envelope returned to callers."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class RawUpstreamResponse(BaseModel):
    """One upstream format's answer: the hit count and the opaque entries."""

    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    entries: List[dict] = []


class UpstreamResult(BaseModel):
    """Both format responses for one request; either may be absent."""

    model_config = ConfigDict(frozen=True)

    flat: Optional[RawUpstreamResponse] = None
    rich: Optional[RawUpstreamResponse] = None

    @property
    def total_count(self) -> int:
        # The rich count wins whenever the rich call ran
        if self.rich is not None:
            return self.rich.total_count
        if self.flat is not None:
            return self.flat.total_count
        return 0


class ListEnvelope(BaseModel):
    count: int
    items: List[dict]
