import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Mapping

from config import settings

logger = logging.getLogger(__name__)

_HOP_BY_HOP = frozenset({
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization",
    "te", "trailer", "transfer-encoding", "upgrade",
})
# Recomputed by urllib for the upstream request
_RECOMPUTED = frozenset({"host", "content-length", "accept-encoding"})
# Not valid once the body has been read and re-sent by the proxy
_BODY_FRAMING = frozenset({"content-length", "content-encoding"})


class UpstreamUnavailable(RuntimeError):
    pass


@dataclass
class UpstreamResponse:
    status: int
    body: bytes
    content_type: str | None
    headers: dict[str, str] = field(default_factory=dict)


def forward_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Drop client-only headers before forwarding.

    All ``x-`` headers are removed except ``x-api-key``.
    """
    kept: dict[str, str] = {}
    for name, value in headers.items():
        lname = name.lower()
        if lname in _HOP_BY_HOP or lname in _RECOMPUTED:
            continue
        if lname.startswith("x-") and lname != "x-api-key":
            continue
        kept[lname] = value
    return kept


def response_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Upstream reply headers safe to hand back to the client."""
    kept: dict[str, str] = {}
    for name, value in (headers or {}).items():
        lname = name.lower()
        if lname in _HOP_BY_HOP or lname in _BODY_FRAMING:
            continue
        kept[lname] = value
    return kept


def upstream_url(path: str, query: str = "") -> str:
    url = f"{settings.proxy_upstream_url.rstrip('/')}/{path.lstrip('/')}"
    if query:
        url += f"?{query}"
    return url


def forward(
    method: str,
    path: str,
    *,
    query: str = "",
    headers: Mapping[str, str] | None = None,
    body: bytes | None = None,
) -> UpstreamResponse:
    """Send a request to the configured upstream API and return its reply.

    Upstream HTTP errors are passed through as responses; only connection
    failures raise UpstreamUnavailable.
    """
    url = upstream_url(path, query)
    req = urllib.request.Request(
        url,
        data=body or None,
        headers=forward_headers(headers or {}),
        method=method.upper(),
    )
    try:
        with urllib.request.urlopen(req, timeout=settings.proxy_timeout_sec) as resp:
            return UpstreamResponse(
                status=resp.status,
                body=resp.read(),
                content_type=resp.headers.get("content-type"),
                headers=response_headers(resp.headers),
            )
    except urllib.error.HTTPError as exc:
        logger.warning("Upstream %s %s returned %d", method, url, exc.code)
        return UpstreamResponse(
            status=exc.code,
            body=exc.read(),
            content_type=exc.headers.get("content-type") if exc.headers else None,
            headers=response_headers(exc.headers),
        )
    except (urllib.error.URLError, TimeoutError) as exc:
        logger.error("Upstream %s %s unreachable: %s", method, url, exc)
        raise UpstreamUnavailable(str(exc)) from exc
