"""LLM-based impact analysis using an OpenAI-compatible chat API."""

import asyncio
import json
import re

import httpx
import structlog
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from passport.config import Settings, get_settings
from passport.models import AnalysisResult
from passport.services.github_client import RepoMetadata

logger = structlog.get_logger()

RETRYABLE_STATUSES = {408, 429, 500, 502, 503, 504}
README_CHAR_BUDGET = 6000
TRUNCATION_MARKER = "\n...\n[truncated]"

SYSTEM_PROMPT = """You are an expert evaluator of open-source projects with a focus on positive societal impact.
Assess whether the project benefits humanity, avoiding harm or abuse. Be objective and conservative.

Return ONLY a strict JSON object with this schema:
{
  "verdict": "approved" | "rejected",
  "details": string,
  "strengths": string[],
  "concerns": string[]
}"""

_FENCED_JSON = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_FENCED_ANY = re.compile(r"```\s*(.*?)```", re.DOTALL)


class AnalyzerError(Exception):
    """Error raised by the LLM analysis pipeline."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        retryable: bool | None = None,
    ):
        self.message = message
        self.status = status
        self.code = code
        if retryable is None:
            retryable = status in RETRYABLE_STATUSES
        self.retryable = retryable
        super().__init__(message)


def truncate(text: str | None, max_chars: int = README_CHAR_BUDGET) -> str:
    if not text:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def build_analysis_messages(
    metadata: RepoMetadata, readme: str | None, summary: str | None = None
) -> list[dict[str, str]]:
    topics = ", ".join(metadata.topics) if metadata.topics else "(none)"
    lines = [
        f"Repository: {metadata.owner}/{metadata.repo}",
        f"Description: {metadata.description or '(none)'}",
        f"Stars: {metadata.stars}",
        f"Topics: {topics}",
        f"URL: {metadata.html_url}",
    ]
    if summary:
        lines += ["", "Code summary:", summary]
    lines += ["", "Top of README (truncated):", truncate(readme)]
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]


def extract_json(text: str) -> str | None:
    """Pull the most likely JSON object out of free-form model output."""
    if not text:
        return None
    for pattern in (_FENCED_JSON, _FENCED_ANY):
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        return text[first : last + 1].strip()
    return None


def _string_list(value) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    if isinstance(value, str) and value:
        return [value]
    return []


def parse_analysis_text(text: str) -> AnalysisResult:
    candidate = extract_json(text) or text
    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        raise AnalyzerError(
            "Failed to parse LLM response as JSON",
            code="LLM_PARSE_ERROR",
            retryable=False,
        )
    if not isinstance(parsed, dict):
        raise AnalyzerError(
            "Failed to parse LLM response as JSON",
            code="LLM_PARSE_ERROR",
            retryable=False,
        )

    verdict = str(parsed.get("verdict") or "").lower()
    if verdict not in ("approved", "rejected"):
        raise AnalyzerError(
            "Invalid or missing verdict in LLM response",
            code="LLM_INVALID_VERDICT",
            retryable=False,
        )

    details = parsed.get("details")
    return AnalysisResult(
        verdict=verdict,
        details=details.strip() if isinstance(details, str) else "",
        strengths=_string_list(parsed.get("strengths")),
        concerns=_string_list(parsed.get("concerns")),
    )


class ImpactAnalyzer:
    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.http_client = http_client

    def _get_client(self) -> AsyncOpenAI:
        if not self.settings.openai_api_key:
            raise AnalyzerError(
                "Missing OPENAI_API_KEY. Set it in your environment to call the LLM API.",
                code="LLM_API_KEY_MISSING",
                retryable=False,
            )
        return AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            base_url=self.settings.openai_base_url,
            timeout=self.settings.openai_request_timeout,
            # complete() owns the retry policy
            max_retries=0,
            http_client=self.http_client,
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        json_mode: bool = False,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> str:
        """Run a chat completion, retrying transient failures with exponential backoff."""
        client = self._get_client()
        attempts = max(1, self.settings.llm_max_attempts)
        extra = {"response_format": {"type": "json_object"}} if json_mode else {}

        for attempt in range(attempts):
            try:
                response = await client.chat.completions.create(
                    model=self.settings.openai_model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **extra,
                )
                content = response.choices[0].message.content if response.choices else None
                if not content:
                    raise AnalyzerError(
                        "LLM response missing content",
                        code="LLM_EMPTY_CONTENT",
                        retryable=True,
                    )
                return content
            except Exception as e:
                error = self._as_analyzer_error(e)
                if not error.retryable or attempt == attempts - 1:
                    if error is e:
                        raise
                    raise error from e
                delay = self.settings.llm_retry_base_delay * 2**attempt
                logger.warning(
                    "LLM call failed, retrying",
                    attempt=attempt + 1,
                    status=error.status,
                    delay=delay,
                )
                await asyncio.sleep(delay)

        raise AnalyzerError("LLM call failed", code="LLM_ERROR")  # unreachable

    @staticmethod
    def _as_analyzer_error(e: Exception) -> AnalyzerError:
        if isinstance(e, AnalyzerError):
            return e
        if isinstance(e, APITimeoutError):
            return AnalyzerError("LLM request timed out", status=408, code="LLM_TIMEOUT")
        if isinstance(e, APIStatusError):
            return AnalyzerError(
                f"LLM API error: {e.message}", status=e.status_code, code="LLM_API_ERROR"
            )
        if isinstance(e, APIConnectionError):
            return AnalyzerError("Could not reach the LLM API", code="LLM_CONNECTION_ERROR")
        status = getattr(e, "status_code", None) or getattr(e, "status", None)
        return AnalyzerError(str(e) or "LLM API error", status=status, code="LLM_API_ERROR")

    async def analyze(
        self,
        metadata: RepoMetadata,
        readme: str | None,
        summary: str | None = None,
    ) -> AnalysisResult:
        """Ask the model for an approved/rejected verdict on the repository."""
        messages = build_analysis_messages(metadata, readme, summary)
        content = await self.complete(messages, json_mode=True)
        result = parse_analysis_text(content)
        logger.info(
            "Repository analyzed",
            owner=metadata.owner,
            repo=metadata.repo,
            verdict=result.verdict,
        )
        return result
