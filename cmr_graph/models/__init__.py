"""CMR Graph data models."""

from cmr_graph.models.config import CatalogConfig
from cmr_graph.models.errors import ErrorResponse
from cmr_graph.models.keymap import KeyMapping, Relation
from cmr_graph.models.mutation import MutationResult
from cmr_graph.models.request import Pagination, RequestInfo
from cmr_graph.models.response import ListEnvelope, RawUpstreamResponse, UpstreamResult

__all__ = [
    "CatalogConfig",
    "ErrorResponse",
    "KeyMapping",
    "ListEnvelope",
    "MutationResult",
    "Pagination",
    "RawUpstreamResponse",
    "Relation",
    "RequestInfo",
    "UpstreamResult",
]
