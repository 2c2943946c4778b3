import hashlib

import structlog
from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from passport.db.store import AnalysisStore, get_optional_store
from passport.utils.badge import render_badge
from passport.utils.validation import is_valid_slug

logger = structlog.get_logger()

router = APIRouter()

CACHE_CONTROL = "public, max-age=300, s-maxage=600"
PLACEHOLDER = ("unknown", "unknown")


def weak_etag(content: str) -> str:
    return f'W/"{hashlib.sha1(content.encode("utf-8")).hexdigest()}"'


def svg_response(content: str, request: Request) -> Response:
    etag = weak_etag(content)
    headers = {
        "Cache-Control": CACHE_CONTROL,
        "ETag": etag,
        "X-Content-Type-Options": "nosniff",
    }
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=304, headers=headers)
    return Response(
        content=content,
        media_type="image/svg+xml; charset=utf-8",
        headers=headers,
    )


async def resolve_state(store: AnalysisStore | None, owner: str, repo: str) -> str:
    """Stored verdict for the badge; anything unexpected shows as pending."""
    if store is None:
        return "pending"
    try:
        verdict = await run_in_threadpool(store.get_verdict, owner, repo)
    except Exception:
        logger.exception("Badge lookup failed", owner=owner, repo=repo)
        return "pending"
    if verdict in ("approved", "rejected"):
        return verdict
    return "pending"


@router.get("/api/badge/{owner}/{repo}")
async def get_badge(
    owner: str,
    repo: str,
    request: Request,
    store: AnalysisStore | None = Depends(get_optional_store),
):
    # Invalid input gets a neutral badge instead of an error
    if not is_valid_slug(owner) or not is_valid_slug(repo):
        return svg_response(render_badge(*PLACEHOLDER, "pending"), request)

    owner_lc, repo_lc = owner.lower(), repo.lower()
    state = await resolve_state(store, owner_lc, repo_lc)
    return svg_response(render_badge(owner_lc, repo_lc, state), request)
