"""Server-rendered passport page for an analyzed repository."""

from html import escape

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from passport.config import get_settings
from passport.db.models import Analysis
from passport.db.store import AnalysisStore, get_optional_store

logger = structlog.get_logger()

router = APIRouter()

LEARNING_KEYWORDS = (
    "personal",
    "portfolio",
    "learning",
    "experimental",
    "tutorial",
    "practice",
    "knowledge sharing",
    "educational resource",
)

LEARNING_TIP = (
    "Add a badge to highlight that this project is for learning, personal growth, "
    "or knowledge sharing, helping others discover and learn from your work."
)
IMPACT_TIP = (
    "Add this badge to the top of your README.md file to let visitors know about "
    "your repository's positive impact on humanity."
)

PAGE_STYLE = """
body{font-family:Inter,Segoe UI,sans-serif;background:#f8fafc;color:#0f172a;margin:0}
main{max-width:760px;margin:48px auto;padding:32px;background:#fff;border-radius:16px;
box-shadow:0 10px 30px rgba(15,23,42,.08)}
h1{font-weight:500;margin-top:0}
.verdict{display:inline-block;padding:4px 12px;border-radius:999px;color:#fff;font-weight:700}
.approved{background:#16a34a}.rejected{background:#ef4444}
pre{background:#0f172a;color:#e2e8f0;padding:12px;border-radius:8px;white-space:pre-wrap;word-break:break-all}
.tip{border-left:4px solid #22d3ee;padding-left:12px;color:#334155}
"""


def pro_tip_message(verdict: str, details: str) -> str:
    lower_details = details.lower()
    is_learning = any(keyword in lower_details for keyword in LEARNING_KEYWORDS)
    if is_learning or verdict != "approved":
        return LEARNING_TIP
    return IMPACT_TIP


def badge_markdown(base_url: str, owner: str, repo: str) -> str:
    return (
        f"[![Humanity Passport]({base_url}/api/badge/{owner}/{repo})]"
        f"({base_url}/passport/{owner}/{repo})"
    )


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\">"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">"
        f"<title>{escape(title)}</title><style>{PAGE_STYLE}</style></head>"
        f"<body><main>{body}</main></body></html>"
    )


def render_not_analyzed(owner: str, repo: str) -> str:
    name = escape(f"{owner}/{repo}")
    body = (
        "<h1>Repository Not Analyzed</h1>"
        f"<p>The repository <strong>{name}</strong> has not been analyzed yet.</p>"
        "<p>Submit this repository for analysis on our home page to receive a "
        "Humanity Passport.</p>"
        '<p><a href="/">Analyze Repository</a></p>'
    )
    return _page("Repository Not Analyzed | Humanity+ Passport", body)


def render_passport(analysis: Analysis, base_url: str) -> str:
    owner, repo = analysis.owner, analysis.repo
    verdict = analysis.verdict
    label = "Approved" if verdict == "approved" else "Not Approved"
    markdown = badge_markdown(base_url, owner, repo)
    updated = analysis.updated_at.strftime("%Y-%m-%d") if analysis.updated_at else ""
    body = (
        "<h1>Humanity+ Passport</h1>"
        f'<h2><a href="https://github.com/{escape(owner)}/{escape(repo)}">'
        f"{escape(owner)}/{escape(repo)}</a></h2>"
        f'<p><span class="verdict {escape(verdict)}">{label}</span> '
        f"<small>Last analyzed {escape(updated)}</small></p>"
        f"<h3>Analysis</h3><p>{escape(analysis.details)}</p>"
        f'<h3>Badge</h3><p><img src="/api/badge/{escape(owner)}/{escape(repo)}" '
        f'alt="Humanity Passport badge for {escape(owner)}/{escape(repo)}"></p>'
        f"<pre>{escape(markdown)}</pre>"
        f'<p class="tip"><strong>Pro tip:</strong> '
        f"{escape(pro_tip_message(verdict, analysis.details))}</p>"
    )
    return _page(f"{owner}/{repo} | Humanity+ Passport", body)


async def find_analysis(store: AnalysisStore | None, owner: str, repo: str) -> Analysis | None:
    """Database errors are treated the same as a missing record."""
    if store is None:
        return None
    try:
        return await run_in_threadpool(store.get, owner, repo)
    except Exception:
        logger.exception("Error fetching analysis", owner=owner, repo=repo)
        return None


@router.get("/passport/{owner}/{repo}", response_class=HTMLResponse)
async def passport_page(
    owner: str,
    repo: str,
    store: AnalysisStore | None = Depends(get_optional_store),
):
    # Path segments arrive percent-decoded from the router.
    analysis = await find_analysis(store, owner, repo)
    if analysis is None:
        return HTMLResponse(render_not_analyzed(owner, repo))
    return HTMLResponse(render_passport(analysis, get_settings().public_base_url))
