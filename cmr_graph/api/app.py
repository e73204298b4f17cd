"""
CMR Graph API — FastAPI endpoints.

Exposes the projection layer over HTTP:
- Field-selection queries for every concept type
- Subscription create / update / delete

Every failure is translated into `{"statusCode", "errors"}` with the
upstream status code preserved.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
from uuid import uuid4

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cmr_graph.datasource.subscription import SubscriptionDataSource
from cmr_graph.errors.translator import parse_error
from cmr_graph.models.config import CatalogConfig
from cmr_graph.query.engine import QueryEngine
from cmr_graph.query.selection import FieldSelection
from cmr_graph.upstream.client import CatalogClient

REQUEST_ID_HEADER = "CMR-Request-Id"


# --- Request Models ---

class GraphRequest(BaseModel):
    selections: List[FieldSelection]


class SubscriptionRequest(BaseModel):
    collectionConceptId: str
    name: str
    query: str
    subscriberId: str
    emailAddress: Optional[str] = None


def _context_headers(request: Request) -> Dict[str, str]:
    """Headers forwarded upstream, with a request id always present."""
    headers = dict(request.headers)
    lowered = {key.lower() for key in headers}
    if REQUEST_ID_HEADER.lower() not in lowered:
        headers[REQUEST_ID_HEADER] = str(uuid4())
    return headers


def _error_response(error: Exception) -> JSONResponse:
    # Data sources already logged the failure
    translated = parse_error(error, should_log=False)
    return JSONResponse(status_code=translated.status_code, content=translated.to_body())


# --- Application Factory ---

def create_app(
    config: Optional[CatalogConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    cfg = config or CatalogConfig.from_env()
    client = CatalogClient(cfg, http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(
        title="CMR Graph API",
        description="Field-driven projection over the CMR search and ingest APIs",
        version="0.1.0",
        lifespan=lifespan,
    )

    engine = QueryEngine(client, cfg)
    subscriptions = SubscriptionDataSource(client, cfg)

    app.state.config = cfg
    app.state.client = client
    app.state.engine = engine

    # === QUERIES ===

    @app.post("/graph")
    async def run_query(req: GraphRequest, request: Request):
        """Execute one or more root field selections."""
        headers = _context_headers(request)
        data: Dict[str, Any] = {}
        try:
            for selection in req.selections:
                data[selection.name] = await engine.execute(selection, headers)
        except Exception as error:
            return _error_response(error)
        return {"data": data}

    # === SUBSCRIPTIONS ===

    @app.post("/subscriptions")
    async def create_subscription(req: SubscriptionRequest, request: Request):
        """Create a subscription under a new native id."""
        try:
            return await subscriptions.ingest_subscription(
                req.model_dump(), _context_headers(request)
            )
        except Exception as error:
            return _error_response(error)

    @app.put("/subscriptions/{native_id}")
    async def update_subscription(native_id: str, req: SubscriptionRequest, request: Request):
        """Update the subscription stored under `native_id`."""
        params = req.model_dump()
        params["nativeId"] = native_id
        try:
            return await subscriptions.ingest_subscription(params, _context_headers(request))
        except Exception as error:
            return _error_response(error)

    @app.delete("/subscriptions/{native_id}")
    async def delete_subscription(native_id: str, conceptId: str, request: Request):
        """Delete a subscription."""
        params = {"conceptId": conceptId, "nativeId": native_id}
        try:
            return await subscriptions.delete_subscription(params, _context_headers(request))
        except Exception as error:
            return _error_response(error)

    return app


# Default application instance
app = create_app()
