"""GitHub URL and slug validation."""

import re

GITHUB_URL_PATTERN = re.compile(
    r"^https://github\.com/([A-Za-z0-9_.\-]+)/([A-Za-z0-9_.\-]+)/?$"
)
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")

EMPTY_URL_MESSAGE = "Please enter a GitHub repository URL"
INVALID_URL_MESSAGE = (
    "Please enter a valid GitHub repository URL "
    "(e.g., https://github.com/owner/repo)"
)


def validate_github_url(url) -> bool:
    """Return True for https://github.com/{owner}/{repo} with an optional trailing slash."""
    if not url or not isinstance(url, str):
        return False
    return GITHUB_URL_PATTERN.fullmatch(url.strip()) is not None


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub URL, keeping the original casing."""
    if not validate_github_url(url):
        return None
    match = GITHUB_URL_PATTERN.fullmatch(url.strip())
    return match.group(1), match.group(2)


def validate_repository_submission(url) -> tuple[bool, str | None]:
    if not url or not isinstance(url, str) or not url.strip():
        return False, EMPTY_URL_MESSAGE
    if not validate_github_url(url):
        return False, INVALID_URL_MESSAGE
    return True, None


def is_valid_slug(value: str) -> bool:
    return bool(value) and SLUG_PATTERN.fullmatch(value) is not None
