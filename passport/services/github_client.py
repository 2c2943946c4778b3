"""GitHub REST client for repository metadata, README and source files."""

import asyncio
import base64
import binascii
from dataclasses import dataclass, field

import httpx
import structlog

from passport.config import Settings, get_settings
from passport.utils.source_filter import rank_and_select_files

logger = structlog.get_logger()

RETRYABLE_STATUSES = {403, 429, 500, 502, 503}
RATE_LIMIT_MESSAGE = "GitHub API rate limit exceeded or access forbidden"


@dataclass
class RepoMetadata:
    owner: str
    repo: str
    description: str | None
    stars: int
    topics: list[str] = field(default_factory=list)
    default_branch: str = "main"
    html_url: str = ""


class GitHubApiError(Exception):
    """Failure talking to the GitHub API."""

    def __init__(
        self, message: str, status: int | None = None, code: str | None = None
    ):
        self.message = message
        self.status = status
        self.code = code
        self.retryable = status in RETRYABLE_STATUSES
        super().__init__(message)


class GitHubClient:
    GITHUB_API_BASE = "https://api.github.com"
    RAW_CONTENT_BASE = "https://raw.githubusercontent.com"
    USER_AGENT = "humanity-passport/0.1.0"
    MAX_FILE_CHARS = 20_000

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.USER_AGENT,
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.github_request_timeout),
            headers=self._headers(),
        )

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            return await client.get(url)
        except httpx.HTTPError as e:
            raise GitHubApiError(f"GitHub request failed: {e}") from e

    async def fetch_repo_metadata(
        self, client: httpx.AsyncClient, owner: str, repo: str
    ) -> RepoMetadata:
        base = f"{self.GITHUB_API_BASE}/repos/{owner}/{repo}"
        repo_resp = await self._get(client, base)
        self._raise_for_status(repo_resp, "Failed to fetch repository metadata")

        # Topics come from a separate endpoint
        topics_resp = await self._get(client, f"{base}/topics")
        self._raise_for_status(topics_resp, "Failed to fetch repository metadata")

        repo_info = self._json_object(repo_resp, "Failed to parse GitHub API response")
        topics = self._json_object(
            topics_resp, "Failed to parse GitHub API response"
        ).get("names")
        if not isinstance(topics, list):
            topics = []

        return RepoMetadata(
            owner=owner,
            repo=repo,
            description=repo_info.get("description"),
            stars=repo_info.get("stargazers_count") or 0,
            topics=[str(t) for t in topics],
            default_branch=repo_info.get("default_branch") or "main",
            html_url=repo_info.get("html_url") or f"https://github.com/{owner}/{repo}",
        )

    async def fetch_readme(
        self,
        client: httpx.AsyncClient,
        owner: str,
        repo: str,
        ref: str | None = None,
    ) -> str | None:
        """Return the decoded README, or None when the repository has none."""
        url = f"{self.GITHUB_API_BASE}/repos/{owner}/{repo}/readme"
        if ref:
            url = f"{url}?ref={ref}"
        resp = await self._get(client, url)
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, "Failed to fetch README")

        data = self._json_object(resp, "Failed to parse README response")
        content = data.get("content")
        if not content:
            return None
        if data.get("encoding", "base64") != "base64":
            return content
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            return None

    async def fetch_repo_data(
        self, owner: str, repo: str
    ) -> tuple[RepoMetadata, str | None]:
        """Fetch metadata and README concurrently. README failures yield None."""
        async with self._client() as client:
            metadata, readme = await asyncio.gather(
                self.fetch_repo_metadata(client, owner, repo),
                self.fetch_readme(client, owner, repo),
                return_exceptions=True,
            )
        if isinstance(metadata, BaseException):
            raise metadata
        if isinstance(readme, BaseException):
            logger.warning(
                "README fetch failed", owner=owner, repo=repo, error=str(readme)
            )
            readme = None
        return metadata, readme

    async def fetch_source_files(
        self, owner: str, repo: str, ref: str, max_chars: int
    ) -> dict[str, str]:
        """Download the highest-priority source files within a character budget."""
        async with self._client() as client:
            tree_url = (
                f"{self.GITHUB_API_BASE}/repos/{owner}/{repo}"
                f"/git/trees/{ref}?recursive=1"
            )
            tree_resp = await self._get(client, tree_url)
            self._raise_for_status(tree_resp, "Failed to fetch repository tree")
            tree_items = self._json_object(
                tree_resp, "Failed to parse GitHub tree response"
            ).get("tree")
            if not isinstance(tree_items, list):
                tree_items = []

            blobs = [
                {"path": item["path"], "size": item.get("size", 0)}
                for item in tree_items
                if isinstance(item, dict) and item.get("type") == "blob" and "path" in item
            ]
            selected = rank_and_select_files(blobs, max_chars=max_chars)

            contents: dict[str, str] = {}
            for file_info in selected:
                path = file_info["path"]
                raw_url = f"{self.RAW_CONTENT_BASE}/{owner}/{repo}/{ref}/{path}"
                try:
                    resp = await client.get(raw_url)
                except httpx.HTTPError:
                    logger.debug("Skipping unreachable file", path=path)
                    continue
                if resp.status_code != 200:
                    continue
                text = resp.text
                if len(text) > self.MAX_FILE_CHARS:
                    text = text[: self.MAX_FILE_CHARS] + "\n... [truncated]"
                contents[path] = text

        logger.info(
            "Fetched source files",
            owner=owner,
            repo=repo,
            selected=len(selected),
            downloaded=len(contents),
        )
        return contents

    @staticmethod
    def _json_object(resp: httpx.Response, message: str) -> dict:
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise GitHubApiError(message, status=502)
        return data

    @staticmethod
    def _raise_for_status(resp: httpx.Response, message: str) -> None:
        status = resp.status_code
        if status < 400:
            return
        if status == 404:
            raise GitHubApiError(
                "Repository not found", status=status, code="GITHUB_REPO_NOT_FOUND"
            )
        if status == 403:
            raise GitHubApiError(
                RATE_LIMIT_MESSAGE, status=status, code="GITHUB_RATE_LIMIT"
            )
        raise GitHubApiError(message, status=status)
