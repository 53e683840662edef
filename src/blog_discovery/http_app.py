"""FastAPI app (internal-only).

Operational endpoints for running discovery and direct extraction; the
public API layer lives elsewhere.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder

from .domain.errors import ExtractionError, FetchError, FetchFailureReason, InvalidInputError
from .lifespan import app_state
from .models.requests import DiscoveryRequest, ExtractRequest, PageRequest

app = FastAPI(title="Blog Discovery Service", version="0.1.0")


def _require(name: str) -> Any:
    service = app_state.get(name)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name}_unavailable")
    return service


def _fetch_error_status(e: FetchError | ExtractionError) -> int:
    return 400 if e.reason is FetchFailureReason.INVALID_PROTOCOL else 502


def _fetch_failure(e: FetchError | ExtractionError) -> HTTPException:
    return HTTPException(
        status_code=_fetch_error_status(e),
        detail={"code": e.info.code, "reason": e.reason.value, "message": e.info.message},
    )


def serialize(obj: Any) -> Any:
    return jsonable_encoder(asdict(obj))


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.post("/api/v1/discovery")
async def run_discovery(payload: DiscoveryRequest) -> dict:
    try:
        if payload.organization_id:
            stored = await _require("website_content_service").discover_and_store(
                payload.organization_id, payload.base_url
            )
            body = serialize(stored.result)
            body["pages_stored"] = stored.pages_stored
            body["ctas_stored"] = stored.ctas_stored
            return body
        result = await _require("orchestrator").discover_blog_pages(payload.base_url)
        return serialize(result)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=e.info.message) from e
    except FetchError as e:
        raise _fetch_failure(e) from e


@app.post("/api/v1/extract")
async def extract_posts(payload: ExtractRequest) -> dict:
    pairs = await _require("orchestrator").extract_urls(payload.urls)
    return {
        "posts": [serialize(post) for _, post in pairs if post is not None],
        "failed_urls": [url for url, post in pairs if post is None],
    }


@app.post("/api/v1/ctas")
async def page_ctas(payload: PageRequest) -> dict:
    try:
        ctas = await _require("content_extractor").extract_page_ctas(payload.url)
    except ExtractionError as e:
        raise _fetch_failure(e) from e
    return {"url": payload.url, "ctas": [serialize(c) for c in ctas]}


@app.post("/api/v1/links")
async def site_links(payload: PageRequest) -> dict:
    try:
        structure = await _require("content_extractor").extract_site_links(payload.url)
    except ExtractionError as e:
        raise _fetch_failure(e) from e
    body = serialize(structure)
    body["total_links_found"] = structure.total_links_found
    return body
