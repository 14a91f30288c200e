from __future__ import annotations

from typing import Dict, Optional
import logging

try:
    from fastapi import FastAPI, HTTPException, Response
    from pydantic import BaseModel
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install 'amazon-ecs[api]'` "
        "or avoid using the API server."
    ) from exc

from ..config import SearchConfig
from ..errors import RequestFailure, ResponseParseError
from ..version import __version__
from .product_search import ProductSearch

logger = logging.getLogger(__name__)

app = FastAPI(title="amazon_ecs API", version=__version__)


class SearchRequest(BaseModel):
    keywords: Optional[str] = None
    index: Optional[str] = None
    raw: bool = False
    items_only: bool = True
    region: Optional[str] = None
    operation: Optional[str] = None
    response_group: Optional[str] = None
    # Extra request fields for operations beyond the keyword search.
    parameters: Optional[Dict[str, str]] = None


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


# Plain def: the builder blocks on its HTTP call, so FastAPI runs it in the threadpool.
@app.post("/search")
def search(req: SearchRequest) -> Response:
    cfg = SearchConfig.from_env()
    if req.region:
        cfg.region = req.region
    if req.operation:
        cfg.operation = req.operation
    if req.response_group:
        cfg.response_group = req.response_group
    try:
        cfg.validate()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    extra = dict(req.parameters or {})
    if req.keywords:
        extra.setdefault("Keywords", req.keywords)
        extra.setdefault("SearchIndex", req.index or cfg.search_index)
    if not extra:
        raise HTTPException(status_code=422, detail="Provide keywords or parameters.")

    client = ProductSearch.from_config(cfg)
    try:
        result = client.output(client.build_parameters(extra), raw=req.raw, items_only=req.items_only)
    except RequestFailure as exc:
        logger.warning("Upstream request failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ResponseParseError as exc:
        logger.warning("Upstream response unparseable: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    if result is None:
        return Response(status_code=204)
    body = result if isinstance(result, bytes) else str(result).encode("utf-8")
    return Response(content=body, media_type="application/xml")
