"""Multi-chunk summary of a repository's source code."""

import structlog

from passport.config import Settings, get_settings
from passport.services.github_client import GitHubClient
from passport.services.llm_analyzer import ImpactAnalyzer
from passport.utils.source_filter import chunk_sources

logger = structlog.get_logger()

CHUNK_PROMPT = """You summarize source code for a reviewer judging a project's purpose and societal impact.
Describe in at most 120 words what this code does, who it serves, and anything that could enable harm.
Respond with plain text only."""

MERGE_PROMPT = """You combine partial summaries of one repository into a single summary of at most 200 words.
Keep concrete facts about purpose, users and potential misuse. Respond with plain text only."""


class CodeSummarizer:
    def __init__(
        self,
        github_client: GitHubClient | None = None,
        analyzer: ImpactAnalyzer | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.github_client = github_client or GitHubClient(self.settings)
        self.analyzer = analyzer or ImpactAnalyzer(self.settings)

    async def summarize(self, owner: str, repo: str, ref: str) -> str | None:
        """Summarize selected source files chunk by chunk, then merge the partial summaries."""
        contents = await self.github_client.fetch_source_files(
            owner, repo, ref, max_chars=self.settings.max_source_chars
        )
        chunks = chunk_sources(
            contents,
            chunk_chars=self.settings.summary_chunk_chars,
            max_chunks=self.settings.summary_max_chunks,
        )
        if not chunks:
            return None

        partials = []
        for index, chunk in enumerate(chunks, start=1):
            text = await self.analyzer.complete(
                [
                    {"role": "system", "content": CHUNK_PROMPT},
                    {
                        "role": "user",
                        "content": f"Repository: {owner}/{repo} (part {index} of {len(chunks)})\n\n{chunk}",
                    },
                ],
                max_tokens=400,
            )
            partials.append(text.strip())

        logger.info("Summarized code chunks", owner=owner, repo=repo, chunks=len(chunks))
        if len(partials) == 1:
            return partials[0]

        joined = "\n\n".join(
            f"Part {i}:\n{summary}" for i, summary in enumerate(partials, start=1)
        )
        merged = await self.analyzer.complete(
            [
                {"role": "system", "content": MERGE_PROMPT},
                {"role": "user", "content": f"Repository: {owner}/{repo}\n\n{joined}"},
            ],
            max_tokens=600,
        )
        return merged.strip()
