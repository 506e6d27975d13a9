"""HTTP API for browse stats and slug resolution.

Endpoints:
    GET /api/jobs/browse-stats                  facet counts for the query's filters
    GET /api/jobs/resolve/{dimension}/{slug}    URL slug -> filter value
    GET /healthz                                liveness probe

Aggregation runs in the threadpool so the blocking SQLAlchemy calls never
stall the event loop; meanwhile the browse-stats handler watches the client
connection and cancels the request's AggregationContext on disconnect.
"""

import asyncio
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from browse_stats.domain import Dimension, FilterSet
from browse_stats.facets import (
    AggregationCancelledError,
    AggregationContext,
    FacetAggregator,
    StoreUnavailableError,
)
from browse_stats.logging import get_logger

logger = get_logger(__name__, component="api")

DISCONNECT_POLL_SECONDS = 0.1


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def cancel_on_disconnect(
    request: Request,
    context: AggregationContext,
    poll_seconds: float = DISCONNECT_POLL_SECONDS,
) -> None:
    """Cancel context once the client disconnects; returns when it is cancelled."""
    while not context.cancelled.is_set():
        if await request.is_disconnected():
            logger.info(
                "Client disconnected, cancelling aggregation",
                extra={"event": "api.request.disconnected", "request_id": context.request_id},
            )
            context.cancel()
            return
        await asyncio.sleep(poll_seconds)


def create_app(aggregator: Optional[FacetAggregator] = None) -> FastAPI:
    """Build the FastAPI application around a FacetAggregator.

    Args:
        aggregator: Configured aggregator (defaults to one using the global session factory)

    Returns:
        FastAPI application
    """
    app = FastAPI(title="Job Browse Facets API")
    app.state.aggregator = aggregator or FacetAggregator()

    @app.get("/healthz")
    def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/jobs/browse-stats")
    async def browse_stats(request: Request):
        filter_set = FilterSet.from_query_params(request.query_params)
        facet_aggregator: FacetAggregator = request.app.state.aggregator
        context = facet_aggregator.new_context(request.headers.get("x-request-id"))

        watcher = asyncio.create_task(cancel_on_disconnect(request, context))
        try:
            stats = await run_in_threadpool(facet_aggregator.aggregate, filter_set, context=context)
        except StoreUnavailableError as e:
            logger.error(
                f"Browse stats request failed: {e}",
                extra={
                    "event": "api.request.failed",
                    "request_id": context.request_id,
                    "path": request.url.path,
                    "status_code": 503,
                },
            )
            return _error_response(503, "Listing store unavailable")
        except AggregationCancelledError:
            return _error_response(503, "Request cancelled")
        finally:
            watcher.cancel()

        return {"success": True, "data": stats.to_dict()}

    @app.get("/api/jobs/resolve/{dimension}/{slug}")
    def resolve(dimension: str, slug: str, request: Request) -> Dict[str, Any]:
        try:
            parsed = Dimension.from_param(dimension)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown dimension: {dimension}")

        facet_aggregator: FacetAggregator = request.app.state.aggregator
        try:
            value = facet_aggregator.resolve_slug(parsed, slug)
        except StoreUnavailableError as e:
            logger.error(
                f"Slug resolution failed: {e}",
                extra={
                    "event": "api.request.failed",
                    "path": request.url.path,
                    "status_code": 503,
                },
            )
            return _error_response(503, "Listing store unavailable")

        if value is None:
            raise HTTPException(status_code=404, detail=f"No {parsed.value} matches slug '{slug}'")

        return {"dimension": parsed.value, "slug": slug, "value": value}

    return app
