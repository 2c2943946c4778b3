import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from passport.config import get_settings
from passport.db.store import AnalysisStore, get_store
from passport.models import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from passport.services.code_summarizer import CodeSummarizer
from passport.services.github_client import GitHubApiError, GitHubClient
from passport.services.llm_analyzer import AnalyzerError, ImpactAnalyzer
from passport.services.rate_limiter import SlidingWindowRateLimiter, client_identifier
from passport.utils.validation import parse_github_url

logger = structlog.get_logger()

router = APIRouter()

limiter = SlidingWindowRateLimiter.from_settings(get_settings())

NO_STORE = {"Cache-Control": "no-store"}


def _json(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=NO_STORE)


def _error(status_code: int, error: ErrorResponse) -> JSONResponse:
    return _json(status_code, error.model_dump(exclude_none=True))


@router.post(
    "/api/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def analyze_repo(request: Request, store: AnalysisStore = Depends(get_store)):
    # 1. Rate limit
    ip = client_identifier(request)
    if not limiter.allow(ip):
        logger.info("Rate limited analyze request", client=ip)
        return _error(
            429,
            ErrorResponse(error="Too many requests", code="RATE_LIMITED", retryable=True),
        )

    # 2. Parse body
    try:
        data = await request.json()
    except ValueError:
        return _error(400, ErrorResponse(error="Invalid JSON body", code="INVALID_JSON"))

    # 3. Validate schema
    try:
        payload = AnalyzeRequest.model_validate(data)
    except ValidationError as e:
        issues = e.errors()
        message = issues[0]["msg"] if issues else "Invalid input"
        return _error(400, ErrorResponse(error=message, code="INVALID_INPUT"))

    # 4. Parse URL
    owner_repo = parse_github_url(payload.repoUrl)
    if owner_repo is None:
        return _error(
            400,
            ErrorResponse(error="Invalid GitHub repository URL", code="INVALID_REPO_URL"),
        )
    owner, repo = owner_repo
    owner_lc, repo_lc = owner.lower(), repo.lower()

    settings = get_settings()
    github_client = GitHubClient(settings)
    analyzer = ImpactAnalyzer(settings)

    try:
        # 5. Fetch metadata and README with the caller's casing
        metadata, readme = await github_client.fetch_repo_data(owner, repo)

        # 6. Optional code summary
        summary = None
        if not settings.skip_code_summary:
            summarizer = CodeSummarizer(github_client, analyzer, settings)
            summary = await summarizer.summarize(owner, repo, metadata.default_branch)

        # 7. Analyze
        result = await analyzer.analyze(metadata, readme, summary)

        # 8. Persist
        await run_in_threadpool(
            store.upsert, owner_lc, repo_lc, result.verdict, result.details
        )
    except GitHubApiError as e:
        logger.warning(
            "GitHub fetch failed", owner=owner, repo=repo, status=e.status, code=e.code
        )
        return _error(
            e.status or 502,
            ErrorResponse(
                error=e.message,
                code=e.code or "GITHUB_API_ERROR",
                retryable=e.retryable,
            ),
        )
    except AnalyzerError as e:
        logger.error("Analysis failed", owner=owner, repo=repo, code=e.code, error=e.message)
        return _error(
            500,
            ErrorResponse(error=e.message, code="INTERNAL_ERROR", retryable=e.retryable),
        )
    except Exception:
        logger.exception("Unexpected analyze failure", owner=owner, repo=repo)
        return _error(
            500,
            ErrorResponse(
                error="Internal Server Error",
                code="INTERNAL_SERVER_ERROR",
                retryable=False,
            ),
        )

    logger.info("Analysis stored", owner=owner_lc, repo=repo_lc, verdict=result.verdict)
    response = AnalyzeResponse(
        owner=owner_lc, repo=repo_lc, verdict=result.verdict, details=result.details
    )
    return _json(200, response.model_dump())
