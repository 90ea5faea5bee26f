import logging

from fastapi import APIRouter, HTTPException, Request, Response
from starlette.concurrency import run_in_threadpool

from services.proxy import UpstreamUnavailable, forward

router = APIRouter()
logger = logging.getLogger(__name__)


@router.api_route(
    "/proxy/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
)
async def proxy(path: str, request: Request) -> Response:
    body = await request.body()
    try:
        upstream = await run_in_threadpool(
            forward,
            request.method,
            path,
            query=request.url.query,
            headers=dict(request.headers),
            body=body,
        )
    except UpstreamUnavailable:
        raise HTTPException(status_code=502, detail="Upstream API unavailable")

    return Response(
        content=upstream.body,
        status_code=upstream.status,
        headers=upstream.headers,
        media_type=upstream.content_type,
    )
